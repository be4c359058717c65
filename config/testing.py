import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "adms_attendance_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

LOG_LEVEL = "WARNING"
LOG_DIR = None
EXPOSE_ERRORS = False
TRUST_PROXY = False

ADMS_IP_WHITELIST_ENABLED = False
ADMS_ALLOWED_IPS = ""
ADMS_ALLOW_LOOPBACK = False
ADMS_REPLAY_TOLERANCE_SECONDS = 300
ADMS_REQUIRE_TIMESTAMP = False
ADMS_REQUIRE_SERIAL = False
ADMS_REQUIRE_SIGNATURE = False
