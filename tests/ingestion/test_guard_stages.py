from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.adms_attendance.adms_attendance.core.exceptions import AuthenticationError, OriginRejectedError
from src.adms_attendance.adms_attendance.ingestion.factory import GuardFactory, IngestionSettings
from src.adms_attendance.adms_attendance.ingestion.guard import IngestionGuard
from src.adms_attendance.adms_attendance.ingestion.schema import DeviceCredentials
from src.adms_attendance.adms_attendance.ingestion.stages.base import GuardContext
from src.adms_attendance.adms_attendance.ingestion.stages.origin_stage import OriginStage, parse_allow_list
from src.adms_attendance.adms_attendance.ingestion.stages.serial_stage import SerialNumberStage

NOW = datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)


def _ctx(ip="10.0.0.1", **creds):
    creds.setdefault("api_key", "k")
    return GuardContext(credentials=DeviceCredentials(**creds), source_ip=ip, received_at=NOW)


def test_factory_orders_push_stages(devices):
    settings = IngestionSettings(ip_whitelist_enabled=True, allowed_ips=("10.0.0.0/8",))
    guard = IngestionGuard(GuardFactory(settings, devices).for_push(), audit=None)
    assert guard.stage_names == ("origin", "device", "serial", "replay", "signature")


def test_factory_skips_origin_when_disabled(devices):
    factory = GuardFactory(IngestionSettings(), devices)
    assert [s.name for s in factory.for_push()][0] == "device"
    assert [s.name for s in factory.for_status()] == ["device"]


def test_settings_from_module_like_object():
    class Settings:
        ADMS_IP_WHITELIST_ENABLED = True
        ADMS_ALLOWED_IPS = "10.10.1.21, 10.20.0.0/16,"
        ADMS_REPLAY_TOLERANCE_SECONDS = "120"
        ADMS_REQUIRE_TIMESTAMP = True

    s = IngestionSettings.from_settings(Settings)
    assert s.allowed_ips == ("10.10.1.21", "10.20.0.0/16")
    assert s.replay_tolerance_seconds == 120
    assert s.require_timestamp is True
    assert s.require_serial is False
    assert s.allow_loopback is False


def test_allow_list_accepts_addresses_networks_and_mapped_ipv6():
    stage = OriginStage(["10.10.1.21", "172.16.0.0/12"])
    stage.check(_ctx("10.10.1.21"))
    stage.check(_ctx("172.20.3.4"))
    stage.check(_ctx("::ffff:10.10.1.21"))

    with pytest.raises(OriginRejectedError):
        stage.check(_ctx("10.10.1.22"))
    with pytest.raises(OriginRejectedError):
        stage.check(_ctx("not-an-ip"))


def test_parse_allow_list_skips_blank_entries():
    assert len(parse_allow_list(["", " 10.0.0.1 ", "192.168.0.0/24"])) == 2


def test_serial_stage_refuses_to_run_without_device():
    with pytest.raises(AuthenticationError):
        SerialNumberStage().check(_ctx(sn="SN"))


def test_guard_stops_at_first_failing_stage(devices, audit):
    class Exploding:
        name = "exploding"

        def check(self, ctx):
            raise AssertionError("must not run")

    factory = GuardFactory(IngestionSettings(), devices)
    guard = IngestionGuard([*factory.for_status(), Exploding()], audit)

    with pytest.raises(AuthenticationError):
        guard.authorize(DeviceCredentials(api_key="wrong"), source_ip="10.0.0.1", received_at=NOW)
    assert audit.last("ADMS_PUSH_REJECTED")["stage"] == "device"
