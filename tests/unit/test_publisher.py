"""Unit tests for PublicationPlanner — naming, isolation, partial pushes."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from conftest import FIXED_TIMESTAMP, FakeBackend
from distroforge.core.errors import PublicationError
from distroforge.core.publisher import DEFAULT_OWNER, PublicationPlanner, RegistryPolicy
from distroforge.models.builds import ResolvedBuild

PRIMARY = [
    "ghcr.io/acme/ubuntu:24.04",
    "ghcr.io/acme/ubuntu:latest",
    f"ghcr.io/acme/ubuntu:{FIXED_TIMESTAMP}",
]
SECONDARY = [
    "quay.io/wsl-images/images:ubuntu-24.04",
    "quay.io/wsl-images/images:ubuntu-latest",
    f"quay.io/wsl-images/images:ubuntu-{FIXED_TIMESTAMP}",
]


@pytest.fixture
def build() -> ResolvedBuild:
    return ResolvedBuild(repository="ubuntu", version="24.04", timestamp=FIXED_TIMESTAMP)


@pytest.fixture
def policy() -> RegistryPolicy:
    return RegistryPolicy(owner="acme")


class TestRegistryPolicy:
    def test_owner_lowercased(self):
        assert RegistryPolicy(owner="  Acme-Org ").owner == "acme-org"

    def test_empty_owner_falls_back(self):
        assert RegistryPolicy(owner="").owner == DEFAULT_OWNER
        assert RegistryPolicy(owner="   ").owner == DEFAULT_OWNER

    def test_frozen(self, policy: RegistryPolicy):
        with pytest.raises(ValidationError):
            policy.owner = "other"


class TestPlan:
    def test_references(self, backend: FakeBackend, policy: RegistryPolicy, build: ResolvedBuild):
        primary, secondary = PublicationPlanner(backend, policy).plan(build)
        assert primary.references == PRIMARY
        assert primary.batch_push is True
        assert primary.repository_reference == "ghcr.io/acme/ubuntu"
        assert secondary.references == SECONDARY
        assert secondary.batch_push is False

    def test_plan_is_pure_and_deterministic(self, backend: FakeBackend, policy, build):
        planner = PublicationPlanner(backend, policy)
        assert planner.plan(build) == planner.plan(build)
        assert backend.calls == []

    def test_default_owner(self, backend: FakeBackend, build: ResolvedBuild):
        primary = PublicationPlanner(backend).plan(build)[0]
        assert primary.references[0] == f"ghcr.io/{DEFAULT_OWNER}/ubuntu:24.04"

    def test_secondary_disabled(self, backend: FakeBackend, build: ResolvedBuild):
        plans = PublicationPlanner(backend, RegistryPolicy(secondary_enabled=False)).plan(build)
        assert [plan.registry for plan in plans] == ["ghcr.io"]

    def test_name_lowercased(self, backend: FakeBackend, policy: RegistryPolicy):
        build = ResolvedBuild(repository="FedoraLinux-42", version="42", timestamp=FIXED_TIMESTAMP)
        primary, secondary = PublicationPlanner(backend, policy).plan(build)
        assert primary.references[0] == "ghcr.io/acme/fedoralinux-42:42"
        assert secondary.references[0] == "quay.io/wsl-images/images:fedoralinux-42-42"


class TestPublish:
    def test_tags_then_pushes(self, backend: FakeBackend, policy: RegistryPolicy, build):
        pushed = PublicationPlanner(backend, policy).publish(build)

        assert pushed == PRIMARY + SECONDARY
        assert [call[2] for call in backend.ops("tag")] == PRIMARY + SECONDARY
        assert all(call[1] == "ubuntu:24.04" for call in backend.ops("tag"))
        assert backend.ops("push_all") == [("push_all", "ghcr.io/acme/ubuntu")]
        assert [call[1] for call in backend.ops("push")] == SECONDARY

    def test_primary_failure_does_not_block_secondary(self, policy: RegistryPolicy, build):
        backend = FakeBackend(fail={"push_all": lambda repo: True})
        with pytest.raises(PublicationError) as excinfo:
            PublicationPlanner(backend, policy).publish(build)

        assert "ghcr.io" in str(excinfo.value)
        assert excinfo.value.pushed == SECONDARY
        assert [call[1] for call in backend.ops("push")] == SECONDARY

    def test_partial_secondary_push_recorded(self, policy: RegistryPolicy, build):
        backend = FakeBackend(fail={"push": lambda ref: ref.endswith("-latest")})
        with pytest.raises(PublicationError) as excinfo:
            PublicationPlanner(backend, policy).publish(build)

        assert excinfo.value.pushed == PRIMARY + SECONDARY[:1]
        assert "quay.io" in str(excinfo.value)
