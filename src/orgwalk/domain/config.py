from __future__ import annotations

"""
Configuration Domain Management.

Handles the runtime settings of a directory export: backend endpoint,
retry budget, traversal limits and the credential source. Settings can be
persisted as JSON in the user data directory; the bearer credential itself
is never persisted and is read from the environment at startup.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from orgwalk.domain.errors import AuthError
from orgwalk.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
DEFAULT_BASE_URL = "https://graph.microsoft.com/beta"
DEFAULT_TOKEN_ENV = "ACCESS_TOKEN"


def get_default_config_path() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration (Session State).

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Backend
        "base_url": DEFAULT_BASE_URL,
        "token_env": DEFAULT_TOKEN_ENV,
        "page_size": 100,
        "timeout": 10.0,

        # Retry policy
        "max_retries": 3,
        "backoff_factor": 0.5,
        "max_retry_after": 60.0,

        # Traversal
        "max_workers": 1,
        "max_depth": None,

        # Session
        "query": "",
        "pick": None,
        "output_path": "",
    }


@dataclass(frozen=True)
class DirectoryConfig:
    """
    Explicit connection settings handed to the Directory Client.

    Attributes:
        access_token: Bearer credential for the Authorization header.
        base_url: REST root of the directory service.
        page_size: Requested page size ($top) for listings.
        timeout: Per-request timeout in seconds.
        max_retries: Retries allowed for transient failures and throttling.
        backoff_factor: Base delay for exponential backoff.
        max_retry_after: Ceiling applied to backend Retry-After hints.
    """
    access_token: str
    base_url: str = DEFAULT_BASE_URL
    page_size: int = 100
    timeout: float = 10.0
    max_retries: int = 3
    backoff_factor: float = 0.5
    max_retry_after: float = 60.0

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        return (
            f"DirectoryConfig(base_url={self.base_url!r}, page_size={self.page_size}, "
            f"timeout={self.timeout}, max_retries={self.max_retries})"
        )


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load persisted settings on top of the defaults.

    Unknown keys are ignored. A missing or corrupted file yields the defaults.

    Args:
        path: Settings file; defaults to the user data directory.

    Returns:
        Dict[str, Any]: Merged configuration.
    """
    config = get_default_config()
    config_file = path or get_default_config_path()

    if not os.path.exists(config_file):
        logger.debug(f"Config file not found at {config_file}. Using defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    for key, value in data.items():
        if key in config:
            config[key] = value
        else:
            logger.debug(f"Ignoring unknown config key '{key}'.")
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist backend settings to disk. Session keys are not stored.

    Args:
        config: The configuration dictionary to save.
        path: Target file; defaults to the user data directory.
    """
    config_file = path or get_default_config_path()
    session_keys = ("query", "pick", "output_path")
    payload = {k: v for k, v in config.items() if k not in session_keys}
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Credential Binding
# -----------------------------------------------------------------------------
def build_directory_config(
        config: Dict[str, Any],
        environ: Optional[Mapping[str, str]] = None,
) -> DirectoryConfig:
    """
    Bind validated settings and the environment credential into a DirectoryConfig.

    Args:
        config: Validated configuration dictionary.
        environ: Environment mapping; defaults to os.environ.

    Returns:
        DirectoryConfig: Immutable client settings.

    Raises:
        AuthError: If the credential variable is unset or blank.
    """
    env = os.environ if environ is None else environ
    token_env = config.get("token_env") or DEFAULT_TOKEN_ENV
    token = (env.get(token_env) or "").strip()
    if not token:
        raise AuthError(f"{token_env} environment variable is not set")

    return DirectoryConfig(
        access_token=token,
        base_url=str(config["base_url"]).rstrip("/"),
        page_size=int(config["page_size"]),
        timeout=float(config["timeout"]),
        max_retries=int(config["max_retries"]),
        backoff_factor=float(config["backoff_factor"]),
        max_retry_after=float(config["max_retry_after"]),
    )
