import os

from config import _flag

# Required; create_app refuses to start without it.
SECRET_KEY = os.getenv("SECRET_KEY", "")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "adms_attendance"),
}

DEBUG = False

AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")
AUTO_SEED_DB = _flag("AUTO_SEED_DB", "0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "/var/log/adms-attendance")
EXPOSE_ERRORS = False
# Only behind nginx / a load balancer: X-Forwarded-For is trusted when on.
TRUST_PROXY = _flag("TRUST_PROXY", "0")

ADMS_IP_WHITELIST_ENABLED = _flag("ADMS_IP_WHITELIST_ENABLED", "1")
ADMS_ALLOWED_IPS = os.getenv("ADMS_ALLOWED_IPS", "")
# Loopback is never trusted implicitly outside development.
ADMS_ALLOW_LOOPBACK = False
ADMS_REPLAY_TOLERANCE_SECONDS = int(os.getenv("ADMS_REPLAY_TOLERANCE_SECONDS", "300"))
ADMS_REQUIRE_TIMESTAMP = True
ADMS_REQUIRE_SERIAL = _flag("ADMS_REQUIRE_SERIAL", "0")
ADMS_REQUIRE_SIGNATURE = _flag("ADMS_REQUIRE_SIGNATURE", "0")
