from __future__ import annotations

from typing import Optional, Protocol

from .model import Organization, Project


class OrganizationRepository(Protocol):
    """Read-only lookups; organization onboarding lives outside this package."""

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        raise NotImplementedError


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError
