"""Runtime configuration — env-driven via pydantic-settings.

Reads ``DISTROFORGE_*`` environment variables and an optional ``.env`` file.
The registry owner additionally honours ``GITHUB_REPOSITORY_OWNER`` so the
tool picks up the repository owner when running under GitHub Actions.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from distroforge.core.acquisition import DEFAULT_MANIFEST_URL
from distroforge.core.publisher import DEFAULT_OWNER, RegistryPolicy


class ForgeConfig(BaseSettings):
    """Distroforge settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DISTROFORGE_LOG_LEVEL=DEBUG
        export DISTROFORGE_ENGINE=podman
        export GITHUB_REPOSITORY_OWNER=MyOrg

    Or via .env file::

        DISTROFORGE_MAX_WORKERS=2
        DISTROFORGE_VERIFY_CHECKSUMS=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DISTROFORGE_",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    log_level: str = "INFO"

    # Inputs
    manifest_url: str = DEFAULT_MANIFEST_URL
    scratch_dir: Path = Path(".distroforge/scratch")
    http_timeout: float = 120.0
    verify_checksums: bool = False

    # Engine
    engine: str = "docker"
    engine_timeout: float | None = None

    # Execution
    max_workers: int = Field(default=1, ge=1)

    # Registries
    owner: str = Field(
        default=DEFAULT_OWNER,
        validation_alias=AliasChoices("DISTROFORGE_OWNER", "GITHUB_REPOSITORY_OWNER"),
    )
    primary_registry: str = "ghcr.io"
    secondary_registry: str = "quay.io"
    secondary_namespace: str = "wsl-images"
    secondary_repository: str = "images"
    secondary_enabled: bool = True

    @field_validator("owner")
    @classmethod
    def _normalize_owner(cls, value: str) -> str:
        value = value.strip()
        return value.lower() if value else DEFAULT_OWNER

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    def registry_policy(self) -> RegistryPolicy:
        """The publication policy these settings describe."""
        return RegistryPolicy(
            primary_registry=self.primary_registry,
            owner=self.owner,
            secondary_registry=self.secondary_registry,
            secondary_namespace=self.secondary_namespace,
            secondary_repository=self.secondary_repository,
            secondary_enabled=self.secondary_enabled,
        )
