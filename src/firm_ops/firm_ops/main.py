from __future__ import annotations

import importlib
import logging
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.enums import ParseErrorPolicy
from .core.exceptions import ConfigurationError
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .invoices.controller import register as register_invoices
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)


def _parse_policy(value) -> ParseErrorPolicy:
    try:
        return ParseErrorPolicy(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"NUMERIC_PARSE_POLICY must be 'zero' or 'reject', got {value!r}")


def create_app() -> Flask:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        ensure_demo_data(db_config)

    container = build_container(
        db_config=db_config,
        parse_policy=_parse_policy(getattr(settings, "NUMERIC_PARSE_POLICY", "zero")),
        standard_daily_hours=Decimal(str(getattr(settings, "STANDARD_DAILY_HOURS", "8"))),
        invoice_due_days=int(getattr(settings, "INVOICE_DUE_DAYS", 30)),
        clock_window_start_hour=int(getattr(settings, "CLOCK_WINDOW_START_HOUR", 7)),
        clock_in_last_hour=int(getattr(settings, "CLOCK_IN_LAST_HOUR", 22)),
        clock_out_last_hour=int(getattr(settings, "CLOCK_OUT_LAST_HOUR", 23)),
        allow_weekend_clocking=bool(getattr(settings, "ALLOW_WEEKEND_CLOCKING", False)),
    )
    app.extensions["firm_ops"] = container

    register_attendance(app, container)
    register_payroll(app, container)
    register_invoices(app, container)

    return app
