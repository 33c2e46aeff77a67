"""Upstream distribution manifest models.

Mirrors the shape of WSL's ``DistributionInfo.json``::

    {
        "ModernDistributions": {
            "Ubuntu": [
                {
                    "Name": "Ubuntu-24.04",
                    "FriendlyName": "Ubuntu 24.04 LTS",
                    "Default": true,
                    "Amd64Url": {"Url": "https://...", "Sha256": "0x..."},
                    "Arm64Url": {"Url": "https://...", "Sha256": "0x..."}
                }
            ]
        },
        "Default": "Ubuntu",
        "Distributions": [...]
    }

Only ``ModernDistributions`` is consumed.  Unknown keys at every level are
ignored so upstream schema additions never break a run.
"""

from __future__ import annotations

from collections.abc import Iterator

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArchiveRef(BaseModel):
    """A downloadable root-filesystem archive and its published checksum."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: str = Field(alias="Url", min_length=1)
    sha256: str = Field(default="", alias="Sha256")


class DistributionEntry(BaseModel):
    """One buildable distribution listed in the manifest.

    ``arm64_url`` is parsed for completeness but never built.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(alias="Name", min_length=1)
    friendly_name: str = Field(default="", alias="FriendlyName")
    default: bool = Field(default=False, alias="Default")
    amd64_url: ArchiveRef = Field(alias="Amd64Url")
    arm64_url: ArchiveRef | None = Field(default=None, alias="Arm64Url")

    @field_validator("friendly_name", mode="before")
    @classmethod
    def _null_friendly_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("arm64_url", mode="before")
    @classmethod
    def _drop_unusable_arm64(cls, value: Any) -> Any:
        # Never built, so a block without a usable Url is treated as absent.
        if not isinstance(value, dict):
            return value if isinstance(value, ArchiveRef) else None
        url = value.get("Url", value.get("url"))
        if not isinstance(url, str) or not url.strip():
            return None
        return value

    @property
    def canonical_name(self) -> str:
        """Repository name used for every image reference of this entry."""
        return self.name.lower()


class DistributionManifest(BaseModel):
    """Parsed manifest: family name -> ordered list of distributions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    families: dict[str, list[DistributionEntry]] = Field(alias="ModernDistributions")
    default: str | None = Field(default=None, alias="Default")

    def iter_distributions(self) -> Iterator[tuple[str, DistributionEntry]]:
        """Yield ``(family, entry)`` pairs in manifest order."""
        for family, entries in self.families.items():
            for entry in entries:
                yield family, entry

    @property
    def distribution_count(self) -> int:
        return sum(len(entries) for entries in self.families.values())
