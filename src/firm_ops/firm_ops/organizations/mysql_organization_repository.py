from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Organization, Project
from .repository import OrganizationRepository, ProjectRepository


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, organization_id: int) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT organization_id, name, email FROM organizations WHERE organization_id=%s",
                (int(organization_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Organization(organization_id=int(r["organization_id"]), name=r["name"], email=r.get("email"))


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id, organization_id, name, client_name FROM projects WHERE project_id=%s",
                (int(project_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Project(
                project_id=int(r["project_id"]),
                organization_id=int(r["organization_id"]),
                name=r["name"],
                client_name=r.get("client_name"),
            )
