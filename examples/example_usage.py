"""Example: drive the service layer directly, without Flask.

Previews a payslip for the seeded demo employee (run scripts/seed_db.py first).
"""

import importlib
import logging
import sys
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.firm_ops.firm_ops.container import build_container
from src.firm_ops.firm_ops.core.enums import Role
from src.firm_ops.firm_ops.employees.model import Actor
from src.firm_ops.firm_ops.payroll.model import PayslipRequest


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    actor = Actor(user_id=1, organization_id=1, role=Role.ADMIN)
    today = date.today()
    payslip = container.payroll_service.generate_preview(
        actor,
        PayslipRequest(
            employee_id=2,
            organization_id=1,
            pay_period_start=today.replace(day=1),
            pay_period_end=today,
        ),
    )
    print(payslip.to_dict())


if __name__ == "__main__":
    main()
