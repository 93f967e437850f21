from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between untrusted configuration sources (persisted
JSON, CLI overrides) and the export engine. Handles type coercion, range
clamping, and default value injection.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from orgwalk.domain.config import get_default_config

logger = logging.getLogger(__name__)

# Inclusive bounds per numeric field
_INT_RANGES: Dict[str, Tuple[int, int]] = {
    "page_size": (1, 999),
    "max_retries": (0, 10),
    "max_workers": (1, 32),
}

_FLOAT_RANGES: Dict[str, Tuple[float, float]] = {
    "timeout": (0.1, 300.0),
    "backoff_factor": (0.0, 60.0),
    "max_retry_after": (0.0, 3600.0),
}

# Optional integers: field -> minimum accepted value
_OPTIONAL_INT_MIN: Dict[str, int] = {
    "max_depth": 0,
    "pick": 1,
}

_STRING_FIELDS = ["base_url", "token_env", "query", "output_path"]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    for field in _STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field, (low, high) in _INT_RANGES.items():
        value = _as_int(merged.get(field), defaults[field], field, warnings, strict)
        merged[field] = _clamp(value, low, high, field, warnings, strict)

    for field, (low, high) in _FLOAT_RANGES.items():
        value = _as_float(merged.get(field), defaults[field], field, warnings, strict)
        merged[field] = _clamp(value, low, high, field, warnings, strict)

    for field, minimum in _OPTIONAL_INT_MIN.items():
        merged[field] = _as_optional_int(merged.get(field), minimum, field, warnings, strict)

    if not merged["base_url"].startswith(("https://", "http://")):
        msg = f"Invalid field 'base_url': '{merged['base_url']}' is not an HTTP(S) URL."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        merged["base_url"] = defaults["base_url"]

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce numeric strings into integers; bools are rejected."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict and isinstance(value, str):
        try:
            converted = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
            return converted
        except ValueError:
            pass

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_float(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if value is None:
        return fallback

    if not strict and isinstance(value, str):
        try:
            converted = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
            return converted
        except ValueError:
            pass

    msg = f"Invalid field '{field}': expected number, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_optional_int(
        value: Any,
        minimum: int,
        field: str,
        warnings: List[str],
        strict: bool,
) -> Optional[int]:
    """Accept None or an integer at or above the minimum."""
    if value is None or value == "":
        return None
    converted = _as_int(value, -1, field, warnings, strict)
    if converted < minimum:
        msg = f"Invalid field '{field}': {value!r} is below {minimum}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Ignored.")
        return None
    return converted


def _clamp(value: Any, low: Any, high: Any, field: str, warnings: List[str], strict: bool) -> Any:
    if low <= value <= high:
        return value
    msg = f"Field '{field}' value {value} outside [{low}, {high}]."
    if strict:
        raise ValueError(msg)
    clamped = min(max(value, low), high)
    warnings.append(f"{msg} Clamped to {clamped}.")
    return clamped
