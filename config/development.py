import os

from config import _flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "adms_attendance"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = _flag("AUTO_INIT_DB", "1")
# Optional: also load the demo devices on startup
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_DIR = os.getenv("LOG_DIR", "logs")
# Unexpected errors include their detail in the JSON body.
EXPOSE_ERRORS = True
TRUST_PROXY = _flag("TRUST_PROXY", "0")

# ADMS device channel
ADMS_IP_WHITELIST_ENABLED = _flag("ADMS_IP_WHITELIST_ENABLED", "0")
ADMS_ALLOWED_IPS = os.getenv("ADMS_ALLOWED_IPS", "")
ADMS_ALLOW_LOOPBACK = True
ADMS_REPLAY_TOLERANCE_SECONDS = int(os.getenv("ADMS_REPLAY_TOLERANCE_SECONDS", "300"))
ADMS_REQUIRE_TIMESTAMP = _flag("ADMS_REQUIRE_TIMESTAMP", "0")
ADMS_REQUIRE_SERIAL = _flag("ADMS_REQUIRE_SERIAL", "0")
ADMS_REQUIRE_SIGNATURE = _flag("ADMS_REQUIRE_SIGNATURE", "0")
