"""Veeam REST API integrations."""
