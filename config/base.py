"""
Configuration shared by the canvas components.

Holds canvas geometry defaults, gesture timing and persistence settings.
Platform-specific loaders subclass BaseConfiguration.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tripcanvas.data_models import Canvas


class ConfigurationError(Exception):
    """Raised when configuration values are missing or invalid."""


@dataclass
class BaseConfiguration:
    """Geometry, gesture and persistence settings."""

    # Canvas geometry
    side_margin: float = 16
    column_spacing: float = 10
    row_spacing: float = 10
    unit_row_height: float = 100

    # Gestures
    long_press_seconds: float = 0.5

    # Persistence
    convex_url: Optional[str] = None
    auth_token: Optional[str] = None
    cache_root: Path = field(default_factory=lambda: Path.home() / ".tripcanvas")
    request_timeout: float = 15.0

    @property
    def use_remote_store(self) -> bool:
        """True if a document store deployment is configured."""
        return bool(self.convex_url)

    @property
    def store_path(self) -> Path:
        """JSON file used by the local canvas store."""
        return self.cache_root / "canvas.json"

    def canvas(self, pixel_width: float) -> Canvas:
        """
        Build canvas geometry for the given view width.

        Args:
            pixel_width: Width reported by the view, 0 before the first layout pass

        Returns:
            Canvas with this configuration's spacing
        """
        return Canvas(
            pixel_width=pixel_width,
            side_margin=self.side_margin,
            column_spacing=self.column_spacing,
            row_spacing=self.row_spacing,
            unit_row_height=self.unit_row_height,
        )

    def validate(self) -> None:
        """
        Check values for consistency.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if self.unit_row_height <= 0:
            raise ConfigurationError(f"unit_row_height must be > 0, got {self.unit_row_height}")
        for name in ("side_margin", "column_spacing", "row_spacing"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.long_press_seconds < 0:
            raise ConfigurationError("long_press_seconds must be >= 0")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be > 0")
        if self.convex_url and not self.convex_url.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid deployment URL: {self.convex_url}")
