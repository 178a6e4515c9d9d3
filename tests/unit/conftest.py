"""Shared fixtures for unit tests.

Uses isolated directories via tmp_path and NET_PAY_CONFIG_PATH
to avoid touching real settings.
"""

import pytest

from netpay.sdk.taxes import default_tax_rules


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Point the SDK at an empty config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("NET_PAY_CONFIG_PATH", str(config_dir))
    return {"config_dir": config_dir, "settings_path": config_dir / "settings.json"}


@pytest.fixture
def rules():
    """Packaged default tax rules."""
    return default_tax_rules()
