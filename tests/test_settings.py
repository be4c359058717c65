from __future__ import annotations

import importlib
import sys

import pytest


def _production(monkeypatch):
    monkeypatch.delitem(sys.modules, "config.production", raising=False)
    return importlib.import_module("config.production")


def test_production_does_not_trust_forwarded_headers_by_default(monkeypatch):
    monkeypatch.delenv("TRUST_PROXY", raising=False)
    assert _production(monkeypatch).TRUST_PROXY is False

    monkeypatch.setenv("TRUST_PROXY", "1")
    assert _production(monkeypatch).TRUST_PROXY is True


def test_production_refuses_to_start_without_secret_key(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delitem(sys.modules, "config.production", raising=False)
    from src.adms_attendance.adms_attendance.main import create_app

    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app(container=container)
