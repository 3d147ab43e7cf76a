import pytest

from fluentmap.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep settings independent of the caller's environment and project files."""
    for var in ("FLUENTMAP_LOG_LEVEL", "FLUENTMAP_CASE_SENSITIVE_COLUMNS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()
