from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Organization:
    """Tenant record; every invoice, payslip and employee belongs to one."""

    organization_id: int
    name: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Project:
    project_id: int
    organization_id: int
    name: str
    client_name: Optional[str] = None
