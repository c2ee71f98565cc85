"""
Property-based тесты для конфигурации.
Проверяют сохранение и загрузку параметров приложения.
"""

import json
import pytest
from hypothesis import given, strategies as st

from care_billing.config import Config, settings


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    monkeypatch.setattr(settings, "config_file", str(path))
    for attr in ("log_level", "default_cadence"):
        monkeypatch.setattr(settings, attr, getattr(settings, attr))
    return path


def test_config_singleton():
    assert Config() is Config()
    assert Config() is settings


@given(
    log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR"]),
    cadence=st.sampled_from(list(Config.SUPPORTED_DEFAULT_CADENCES)),
)
def test_settings_persistence(tmp_path_factory, log_level, cadence):
    """Сохранённые настройки загружаются обратно без изменений."""
    path = tmp_path_factory.mktemp("cfg") / "config.json"
    original = (settings.config_file, settings.log_level, settings.default_cadence)
    settings.config_file = str(path)

    try:
        settings.log_level = log_level
        settings.default_cadence = cadence
        settings.save()

        settings.log_level = "INFO"
        settings.default_cadence = "monthly"
        settings.load()

        assert settings.log_level == log_level
        assert settings.default_cadence == cadence

        data = json.loads(path.read_text(encoding="utf-8"))
        # путь к БД не хранится в конфигурации
        assert set(data) == {"log_level", "default_cadence"}
    finally:
        settings.config_file, settings.log_level, settings.default_cadence = original


def test_unsupported_default_cadence(config_file):
    config_file.write_text(json.dumps({"default_cadence": "yearly"}), encoding="utf-8")

    settings.load()

    assert settings.default_cadence == "monthly"


def test_corrupted_file_keeps_defaults(config_file):
    config_file.write_text("{not json", encoding="utf-8")
    settings.log_level = "WARNING"

    settings.load()

    assert settings.log_level == "WARNING"


def test_missing_file(config_file):
    settings.default_cadence = "weekly"
    settings.load()
    assert settings.default_cadence == "weekly"
