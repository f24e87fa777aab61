"""
Configuration package.

Provides the configuration dataclass shared by the canvas components and an
environment-backed implementation that reads ``.env`` files.
"""
from .base import BaseConfiguration, ConfigurationError
from .environment import EnvironmentConfiguration

__all__ = [
    'BaseConfiguration',
    'ConfigurationError',
    'EnvironmentConfiguration'
]
