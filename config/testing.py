import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "firm_ops_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

NUMERIC_PARSE_POLICY = os.getenv("NUMERIC_PARSE_POLICY", "zero")

STANDARD_DAILY_HOURS = "8"
INVOICE_DUE_DAYS = 30

CLOCK_WINDOW_START_HOUR = 7
CLOCK_IN_LAST_HOUR = 22
CLOCK_OUT_LAST_HOUR = 23
ALLOW_WEEKEND_CLOCKING = False
