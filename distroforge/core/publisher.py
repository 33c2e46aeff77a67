"""Publication planning — one ResolvedBuild, every registry reference.

Naming rules
------------
Primary registry (one repository per distribution, batch push)::

    <primary_registry>/<owner>/<name>:<version>
    <primary_registry>/<owner>/<name>:latest
    <primary_registry>/<owner>/<name>:<timestamp>

Secondary registry (one shared repository, the distribution lives in the
tag, pushed one reference at a time)::

    <secondary_registry>/<namespace>/<repository>:<name>-<version>
    <secondary_registry>/<namespace>/<repository>:<name>-latest
    <secondary_registry>/<namespace>/<repository>:<name>-<timestamp>
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, field_validator

from distroforge.backends.base import ImageBackend
from distroforge.core.errors import BackendError, PublicationError
from distroforge.models.builds import PublicationTarget, RegistryPlan, ResolvedBuild

logger = logging.getLogger(__name__)

DEFAULT_OWNER = "wsl-images"


class RegistryPolicy(BaseModel):
    """Where builds are published.  Passed in explicitly, never looked up."""

    model_config = ConfigDict(frozen=True)

    primary_registry: str = "ghcr.io"
    owner: str = DEFAULT_OWNER
    secondary_registry: str = "quay.io"
    secondary_namespace: str = "wsl-images"
    secondary_repository: str = "images"
    secondary_enabled: bool = True

    @field_validator("owner")
    @classmethod
    def _normalize_owner(cls, value: str) -> str:
        value = value.strip()
        return value.lower() if value else DEFAULT_OWNER


class PublicationPlanner:
    """Expands builds into RegistryPlans and pushes them.

    Parameters
    ----------
    backend:
        Engine used for tagging and pushing.
    policy:
        Registry naming policy.
    """

    def __init__(self, backend: ImageBackend, policy: RegistryPolicy | None = None) -> None:
        self._backend = backend
        self.policy = policy or RegistryPolicy()

    # ------------------------------------------------------------------
    # Planning (pure)
    # ------------------------------------------------------------------

    def plan(self, build: ResolvedBuild) -> list[RegistryPlan]:
        """Derive every publication target for *build*, primary registry first."""
        name = build.repository.lower()
        policy = self.policy

        primary_repo = f"{policy.owner}/{name}"
        plans = [
            RegistryPlan(
                registry=policy.primary_registry,
                repository=primary_repo,
                targets=[
                    PublicationTarget(registry=policy.primary_registry, repository=primary_repo, tag=tag)
                    for tag in build.tags
                ],
                batch_push=True,
            )
        ]

        if policy.secondary_enabled:
            shared_repo = f"{policy.secondary_namespace}/{policy.secondary_repository}"
            plans.append(
                RegistryPlan(
                    registry=policy.secondary_registry,
                    repository=shared_repo,
                    targets=[
                        PublicationTarget(
                            registry=policy.secondary_registry,
                            repository=shared_repo,
                            tag=f"{name}-{tag}",
                        )
                        for tag in build.tags
                    ],
                    batch_push=False,
                )
            )
        return plans

    # ------------------------------------------------------------------
    # Publication (side effects)
    # ------------------------------------------------------------------

    def publish(self, build: ResolvedBuild) -> list[str]:
        """Tag and push *build* to every registry in the plan.

        Each registry is attempted even if an earlier one failed.  Raises
        ``PublicationError`` afterwards if any registry failed; the error's
        ``pushed`` attribute lists what did reach a registry.
        """
        pushed: list[str] = []
        failed: list[str] = []

        for plan in self.plan(build):
            try:
                self._publish_registry(build, plan, pushed)
            except BackendError as exc:
                logger.error(
                    "Publication of %s to %s failed: %s",
                    build.local_image,
                    plan.registry,
                    exc,
                )
                failed.append(f"{plan.registry} ({exc})")

        if failed:
            raise PublicationError(
                f"Failed to publish {build.local_image} to: " + "; ".join(failed),
                pushed=pushed,
            )
        return pushed

    def _publish_registry(
        self, build: ResolvedBuild, plan: RegistryPlan, pushed: list[str]
    ) -> None:
        """Tag then push one registry plan, appending to *pushed* as it goes."""
        for reference in plan.references:
            logger.info("Tagging %s as %s", build.local_image, reference)
            self._backend.tag(build.local_image, reference)

        if plan.batch_push:
            logger.info("Pushing all tags of %s", plan.repository_reference)
            self._backend.push_all_tags(plan.repository_reference)
            pushed.extend(plan.references)
        else:
            for reference in plan.references:
                logger.info("Pushing %s", reference)
                self._backend.push(reference)
                pushed.append(reference)

        logger.info("Images pushed successfully to %s", plan.registry)
