"""Shared test fixtures."""
import pytest

from fitpass.config import settings


@pytest.fixture
def sanity_settings(monkeypatch):
    """Point settings at a test Sanity project."""
    monkeypatch.setattr(settings, "sanity_project_id", "testproj")
    monkeypatch.setattr(settings, "sanity_dataset", "production")
    monkeypatch.setattr(settings, "sanity_api_version", "2024-10-01")
    monkeypatch.setattr(settings, "sanity_use_cdn", False)
    monkeypatch.setattr(settings, "sanity_read_token", "read-token")
    monkeypatch.setattr(settings, "sanity_write_token", "write-token")
    return settings
