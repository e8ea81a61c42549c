#!/usr/bin/env python3
"""
Environment variable loader with .env file support.

Safely loads environment variables from .env file if present, and assembles
collector input parameters from VEEAM_* variables when no explicit
parameter document is given.
"""

import os
from pathlib import Path
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Input parameter name -> environment variable
PARAM_ENV_VARS = {
    'api_endpoint': 'VEEAM_API_ENDPOINT',
    'user': 'VEEAM_USER',
    'password': 'VEEAM_PASSWORD',
    'created_after': 'VEEAM_CREATED_AFTER',
    'http_proxy': 'VEEAM_HTTP_PROXY',
    'session_history_depth': 'VEEAM_SESSION_HISTORY_DEPTH',
}


def load_env_file(env_file_path: str = ".env", project_root: Optional[Path] = None) -> int:
    """
    Load environment variables from .env file if it exists.

    Args:
        env_file_path: Path to .env file (default: ".env" in project root)
        project_root: Directory the path is relative to

    Returns:
        Number of variables loaded
    """
    if project_root is None:
        # src/core/env_loader.py -> project root
        project_root = Path(__file__).parent.parent.parent
    env_path = project_root / env_file_path

    if not env_path.exists():
        logger.debug(f"No .env file found at {env_path}")
        return 0

    try:
        with open(env_path, 'r', encoding='utf-8') as f:
            lines = f.readlines()
    except OSError as e:
        logger.error(f"Error loading .env file {env_path}: {e}")
        return 0

    loaded_count = 0
    for line_num, line in enumerate(lines, 1):
        line = line.strip()

        # Skip empty lines and comments
        if not line or line.startswith('#'):
            continue

        if '=' not in line:
            logger.warning(f"Invalid .env format at line {line_num}: {line}")
            continue

        key, value = line.split('=', 1)
        key = key.strip()
        value = value.strip()

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        # Env vars take precedence
        if key not in os.environ:
            os.environ[key] = value
            loaded_count += 1
            logger.debug(f"Loaded {key} from .env")
        else:
            logger.debug(f"Skipped {key} (already in environment)")

    logger.info(f"Loaded {loaded_count} variables from {env_path}")
    return loaded_count


def get_params_from_env() -> Dict[str, Any]:
    """
    Build the collector parameter mapping from VEEAM_* environment variables.

    Unset variables are omitted so the validator reports them as missing.
    """
    params = {}
    for name, env_var in PARAM_ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            params[name] = value
    return params
