"""Unit tests for ForgeConfig — defaults, env overrides, owner normalization."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from distroforge.config import ForgeConfig
from distroforge.core.acquisition import DEFAULT_MANIFEST_URL
from distroforge.core.publisher import DEFAULT_OWNER

_ENV_VARS = [
    "GITHUB_REPOSITORY_OWNER",
    "DISTROFORGE_OWNER",
    "DISTROFORGE_LOG_LEVEL",
    "DISTROFORGE_ENGINE",
    "DISTROFORGE_MAX_WORKERS",
    "DISTROFORGE_VERIFY_CHECKSUMS",
    "DISTROFORGE_SECONDARY_ENABLED",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate from the caller's environment and any local .env file."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_defaults(self):
        cfg = ForgeConfig()
        assert cfg.log_level == "INFO"
        assert cfg.manifest_url == DEFAULT_MANIFEST_URL
        assert cfg.engine == "docker"
        assert cfg.max_workers == 1
        assert cfg.verify_checksums is False
        assert cfg.owner == DEFAULT_OWNER
        assert cfg.scratch_dir == Path(".distroforge/scratch")

    def test_registry_policy(self):
        policy = ForgeConfig().registry_policy()
        assert policy.primary_registry == "ghcr.io"
        assert policy.secondary_registry == "quay.io"
        assert policy.secondary_namespace == "wsl-images"
        assert policy.secondary_repository == "images"
        assert policy.secondary_enabled is True


class TestEnvironment:
    def test_prefixed_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DISTROFORGE_ENGINE", "podman")
        monkeypatch.setenv("DISTROFORGE_MAX_WORKERS", "4")
        monkeypatch.setenv("DISTROFORGE_VERIFY_CHECKSUMS", "true")
        monkeypatch.setenv("DISTROFORGE_LOG_LEVEL", "debug")
        cfg = ForgeConfig()
        assert cfg.engine == "podman"
        assert cfg.max_workers == 4
        assert cfg.verify_checksums is True
        assert cfg.log_level == "DEBUG"

    def test_github_owner_lowercased(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_REPOSITORY_OWNER", "MyOrg")
        assert ForgeConfig().owner == "myorg"
        assert ForgeConfig().registry_policy().owner == "myorg"

    def test_explicit_owner_wins(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_REPOSITORY_OWNER", "from-ci")
        monkeypatch.setenv("DISTROFORGE_OWNER", "Explicit")
        assert ForgeConfig().owner == "explicit"

    def test_empty_owner_falls_back(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_REPOSITORY_OWNER", "  ")
        assert ForgeConfig().owner == DEFAULT_OWNER

    def test_secondary_can_be_disabled(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DISTROFORGE_SECONDARY_ENABLED", "false")
        assert ForgeConfig().registry_policy().secondary_enabled is False

    def test_dotenv_file(self, tmp_path: Path):
        (tmp_path / ".env").write_text("DISTROFORGE_ENGINE=nerdctl\n", encoding="utf-8")
        assert ForgeConfig().engine == "nerdctl"

    def test_invalid_worker_count(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DISTROFORGE_MAX_WORKERS", "0")
        with pytest.raises(ValidationError):
            ForgeConfig()
