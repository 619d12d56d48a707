"""
Utility helpers for xauth configuration handling.
"""

from .config import (
    get_config_value,
    load_config_file,
    load_config_from_env,
    parse_duration_string,
    to_timedelta,
)

__all__ = [
    "get_config_value",
    "load_config_file",
    "load_config_from_env",
    "parse_duration_string",
    "to_timedelta",
]
