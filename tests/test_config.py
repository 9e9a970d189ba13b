import json

import structlog
from structlog.testing import capture_logs

from oncotrack.catalog.registry import DrugModuleCatalog
from oncotrack.config import EngineSettings, Settings, StoreSettings, get_settings
from oncotrack.engine.resolver import resolve
from oncotrack.errors import UnknownRegimenError, UnresolvedDrugError
from oncotrack.observability.logging import configure_from_settings, configure_logging


def test_defaults(monkeypatch):
    for name in ("ONCOTRACK_DEBUG", "ONCOTRACK_REJECT_UNRESOLVED", "ONCOTRACK_CATALOG_PATH"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.engine.debug is False
    assert settings.engine.catalog_path is None
    assert settings.engine.reject_unresolved is False
    assert settings.engine.reject_empty is False
    assert settings.store.active_queue_limit == 50


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ONCOTRACK_DEBUG", "true")
    monkeypatch.setenv("ONCOTRACK_REJECT_EMPTY", "true")
    monkeypatch.setenv("ONCOTRACK_STORE_ACTIVE_QUEUE_LIMIT", "10")

    assert EngineSettings().reject_empty is True
    assert EngineSettings().debug is True
    assert StoreSettings().active_queue_limit == 10


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_errors_serialize():
    assert UnknownRegimenError("FOLFOX").to_dict() == {
        "error": "unknown_regimen",
        "message": "Unknown regimen code: 'FOLFOX'",
        "regimen_code": "FOLFOX",
    }
    payload = UnresolvedDrugError("T-DM1", ["Trastuzumab Emtansine"]).to_dict()
    assert payload["unresolved"] == ["Trastuzumab Emtansine"]


def test_json_logging(capsys):
    try:
        configure_logging("INFO", json_output=True)
        structlog.get_logger("oncotrack.test").info("Questionnaire assembled", total_items=2)
        structlog.get_logger("oncotrack.test").debug("filtered out")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["event"] == "Questionnaire assembled"
        assert record["level"] == "info"
        assert record["total_items"] == 2
        assert "timestamp" in record
    finally:
        structlog.reset_defaults()


def test_unresolved_drugs_are_logged():
    with capture_logs() as logs:
        resolve(["Trastuzumab Emtansine"], DrugModuleCatalog([]))

    warning = next(log for log in logs if log["log_level"] == "warning")
    assert warning["unresolved"] == ["Trastuzumab Emtansine"]


def test_debug_setting_enables_debug_logging(capsys):
    settings = Settings()
    settings.engine = EngineSettings(debug=True, log_level="WARNING", log_json=True)

    try:
        configure_from_settings(settings)
        structlog.get_logger("oncotrack.test").debug("Drug entry resolved via alias")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        assert len(lines) == 1
        assert json.loads(lines[0])["level"] == "debug"
    finally:
        structlog.reset_defaults()
