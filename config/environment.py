"""
Environment-backed configuration.

Reads ``TRIPCANVAS_*`` variables, loading a ``.env`` file first when present.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .base import BaseConfiguration, ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TRIPCANVAS_"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


@dataclass
class EnvironmentConfiguration(BaseConfiguration):
    """Configuration populated from environment variables."""

    @classmethod
    def from_env(cls, dotenv_path: Optional[Path] = None) -> 'EnvironmentConfiguration':
        """
        Load configuration from the environment.

        Args:
            dotenv_path: Explicit ``.env`` file, searched for when omitted

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a variable has an invalid value
        """
        load_dotenv(dotenv_path)

        defaults = BaseConfiguration()
        cache_root = os.getenv(ENV_PREFIX + "CACHE_ROOT")

        config = cls(
            side_margin=_get_float("SIDE_MARGIN", defaults.side_margin),
            column_spacing=_get_float("COLUMN_SPACING", defaults.column_spacing),
            row_spacing=_get_float("ROW_SPACING", defaults.row_spacing),
            unit_row_height=_get_float("ROW_HEIGHT", defaults.unit_row_height),
            long_press_seconds=_get_float("LONG_PRESS_SECONDS", defaults.long_press_seconds),
            convex_url=os.getenv(ENV_PREFIX + "CONVEX_URL") or None,
            auth_token=os.getenv(ENV_PREFIX + "AUTH_TOKEN") or None,
            cache_root=Path(cache_root).expanduser() if cache_root else defaults.cache_root,
            request_timeout=_get_float("REQUEST_TIMEOUT", defaults.request_timeout),
        )
        config.validate()
        logger.debug("Configuration loaded (remote store: %s)", config.use_remote_store)
        return config
