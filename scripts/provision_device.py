"""Register or deactivate a fingerprint device from the command line.

The generated API key is printed once; store it in the device's ADMS
settings. It cannot be shown again.
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.adms_attendance.adms_attendance.container import build_container
from src.adms_attendance.adms_attendance.core.exceptions import DomainError
from src.adms_attendance.adms_attendance.ingestion.factory import IngestionSettings
from src.adms_attendance.adms_attendance.logging_config import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="ADMS device registry utility.")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Provision a new device and print its API key.")
    add.add_argument("device_id", help="Registry id, e.g. FP-FT-02.")
    add.add_argument("serial_number", help="Serial printed on the terminal.")
    add.add_argument("ip_address", help="Address the terminal pushes from.")
    add.add_argument("--location", default=None)
    add.add_argument("--faculty", default=None)

    off = sub.add_parser("deactivate", help="Stop accepting pushes from a device.")
    off.add_argument("device_id")

    sub.add_parser("list", help="List registered devices.")

    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", None))
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        ingestion_settings=IngestionSettings.from_settings(settings),
    )
    service = container.device_service

    try:
        if args.command == "add":
            provisioned = service.provision(
                device_id=args.device_id,
                serial_number=args.serial_number,
                ip_address=args.ip_address,
                location=args.location,
                faculty=args.faculty,
                actor="cli",
            )
            print(f"OK: provisioned {provisioned.device.device_id}")
            print(f"API key: {provisioned.api_key}")
        elif args.command == "deactivate":
            device = service.deactivate(args.device_id, actor="cli")
            print(f"OK: {device.device_id} is_active={device.is_active}")
        else:
            for d in service.list_devices():
                state = "active" if d.is_active else "inactive"
                print(f"{d.device_id}\t{d.serial_number}\t{d.ip_address}\t{state}\t{d.last_seen or '-'}")
    except DomainError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
