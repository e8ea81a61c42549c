"""Veeam metrics collector core: configuration, models and the aggregation pipeline."""
