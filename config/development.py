import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "firm_ops"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the demo organization on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# "zero": unparseable optional amounts are logged and treated as 0; "reject": 400 error
NUMERIC_PARSE_POLICY = os.getenv("NUMERIC_PARSE_POLICY", "zero")

STANDARD_DAILY_HOURS = os.getenv("STANDARD_DAILY_HOURS", "8")
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "30"))

CLOCK_WINDOW_START_HOUR = int(os.getenv("CLOCK_WINDOW_START_HOUR", "7"))
CLOCK_IN_LAST_HOUR = int(os.getenv("CLOCK_IN_LAST_HOUR", "22"))
CLOCK_OUT_LAST_HOUR = int(os.getenv("CLOCK_OUT_LAST_HOUR", "23"))
ALLOW_WEEKEND_CLOCKING = bool(int(os.getenv("ALLOW_WEEKEND_CLOCKING", "0")))
