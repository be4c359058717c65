from __future__ import annotations

import pytest

from src.adms_attendance.adms_attendance.core.enums import ConflictKind
from src.adms_attendance.adms_attendance.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.adms_attendance.adms_attendance.devices.service import DeviceService


@pytest.fixture
def service(devices, audit):
    return DeviceService(devices, audit)


def test_provision_generates_key_and_audits_redacted(service, devices, audit):
    provisioned = service.provision(
        device_id="FP-FEB-01",
        serial_number="SN-FEB-0001",
        ip_address="10.10.2.31",
        location="Gedung B",
        faculty="Fakultas Ekonomi",
        actor="admin01",
    )

    assert len(provisioned.api_key) == 64
    int(provisioned.api_key, 16)
    assert devices.find_active_by_credential(provisioned.api_key).device_id == "FP-FEB-01"
    entry = audit.last("DEVICE_PROVISIONED")
    assert entry["api_key"] == provisioned.api_key[:4] + "..."
    assert provisioned.api_key not in str(audit.events)


def test_listing_never_exposes_api_key(service):
    views = [d.public_view() for d in service.list_devices()]
    assert [v["device_id"] for v in views] == ["FP-FT-01", "FP-OLD-01"]
    assert all("api_key" not in v for v in views)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"device_id": "", "serial_number": "SN", "ip_address": "10.0.0.1"},
        {"device_id": "D", "serial_number": "SN", "ip_address": "999.1.1.1"},
        {"device_id": "D" * 51, "serial_number": "SN", "ip_address": "10.0.0.1"},
    ],
)
def test_provision_validates_input(service, kwargs):
    with pytest.raises(ValidationError):
        service.provision(**kwargs)


def test_provision_duplicate_serial_conflicts(service):
    with pytest.raises(ConflictError) as exc:
        service.provision(device_id="FP-NEW", serial_number="SN-FT-0001", ip_address="10.0.0.1")
    assert exc.value.kind == ConflictKind.DEVICE


def test_deactivate_blocks_future_pushes(service, make_ingestion, make_payload, audit):
    device = service.deactivate("FP-FT-01", actor="admin01")
    assert device.is_active is False
    assert audit.last("DEVICE_DEACTIVATED")["device_id"] == "FP-FT-01"

    with pytest.raises(AuthenticationError):
        make_ingestion().push(make_payload(), source_ip="10.10.1.21")


def test_deactivate_unknown_device(service):
    with pytest.raises(NotFoundError):
        service.deactivate("FP-NOPE")
