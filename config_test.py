"""Configuration loading and validation."""
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from config import BaseConfiguration, ConfigurationError, EnvironmentConfiguration
from config.environment import ENV_PREFIX

VARIABLES = (
    "SIDE_MARGIN", "COLUMN_SPACING", "ROW_SPACING", "ROW_HEIGHT", "LONG_PRESS_SECONDS",
    "CONVEX_URL", "AUTH_TOKEN", "CACHE_ROOT", "REQUEST_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in VARIABLES:
        monkeypatch.delenv(ENV_PREFIX + name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return env_file


def test_defaults(clean_env):
    config = EnvironmentConfiguration.from_env(clean_env)
    assert config.side_margin == 16
    assert config.row_spacing == 10
    assert config.unit_row_height == 100
    assert config.long_press_seconds == 0.5
    assert config.use_remote_store is False
    assert config.store_path == Path.home() / ".tripcanvas" / "canvas.json"


def test_reads_environment(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_PREFIX + "ROW_HEIGHT", "120")
    monkeypatch.setenv(ENV_PREFIX + "CONVEX_URL", "https://happy-otter-123.convex.cloud")
    monkeypatch.setenv(ENV_PREFIX + "AUTH_TOKEN", "secret")
    monkeypatch.setenv(ENV_PREFIX + "CACHE_ROOT", str(tmp_path / "cache"))

    config = EnvironmentConfiguration.from_env(clean_env)

    assert config.unit_row_height == 120
    assert config.use_remote_store
    assert config.auth_token == "secret"
    assert config.store_path == tmp_path / "cache" / "canvas.json"
    assert config.canvas(390).row_stride == 130


def test_reads_dotenv_file(clean_env):
    clean_env.write_text(f"{ENV_PREFIX}SIDE_MARGIN=20\n{ENV_PREFIX}REQUEST_TIMEOUT=3\n")
    with patch.dict(os.environ):
        config = EnvironmentConfiguration.from_env(clean_env)
    assert config.side_margin == 20
    assert config.request_timeout == 3
    assert config.canvas(400).column_width == pytest.approx((400 - 40 - 10) / 2)


@pytest.mark.parametrize("name, value", [
    ("ROW_HEIGHT", "wide"),
    ("ROW_HEIGHT", "0"),
    ("ROW_SPACING", "-1"),
    ("REQUEST_TIMEOUT", "0"),
    ("CONVEX_URL", "happy-otter-123.convex.cloud"),
])
def test_invalid_values(clean_env, monkeypatch, name, value):
    monkeypatch.setenv(ENV_PREFIX + name, value)
    with pytest.raises(ConfigurationError):
        EnvironmentConfiguration.from_env(clean_env)


def test_canvas_uses_configured_spacing():
    canvas = BaseConfiguration(side_margin=8, column_spacing=4).canvas(0)
    assert canvas.is_ready is False
    assert canvas.side_margin == 8
    assert canvas.column_spacing == 4
