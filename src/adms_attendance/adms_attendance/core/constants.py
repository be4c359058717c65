"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Jam batas keterlambatan (check-in setelah jam ini dihitung terlambat).
LATE_CUTOFF = time(8, 0, 0)

DEFAULT_REPLAY_TOLERANCE_SECONDS = 5 * 60
DEFAULT_VERIFIKASI = "fingerprint"

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

API_KEY_BYTES = 32
REDACTED_KEY_PREFIX = 4

SERVICE_NAME = "adms-attendance"
