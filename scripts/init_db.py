"""Create the database (if needed) and apply database/schema.sql."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.adms_attendance.adms_attendance.database.bootstrap import apply_schema, list_tables

EXPECTED_TABLES = ("attendance", "devices")


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    missing = [t for t in EXPECTED_TABLES if t not in tables]

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    if missing:
        print(f"ERROR: schema applied to {target} but tables are missing: {', '.join(missing)}", file=sys.stderr)
        return 1
    print(f"OK: Applied schema.sql -> {target} (tables={', '.join(sorted(tables))})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
