"""
Property-based тесты для системы логирования.
Проверяют формат и структуру логов.
"""

import json
import logging
import sys
from datetime import date
from decimal import Decimal
from hypothesis import given, strategies as st

from care_billing.models import InstallmentStatus
from care_billing.utils.logger import JsonFormatter, setup_logging


def _record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test_path.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
        func="test_func",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@given(
    message=st.text(),
    level=st.sampled_from([logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR]),
)
def test_json_formatter_structure(message, level):
    """Каждая запись является валидным JSON с обязательными полями (unicode сохраняется)."""
    data = json.loads(JsonFormatter().format(_record(message, level)))

    assert "timestamp" in data
    assert data["level"] == logging.getLevelName(level)
    assert data["function"] == "test_func"
    assert data["line"] == 10
    assert data["message"] == message


@given(amount=st.decimals(min_value=Decimal('0.01'), max_value=Decimal('999999.99'), places=2,
                          allow_nan=False, allow_infinity=False))
def test_decimal_extra_keeps_precision(amount):
    """Суммы из extra сериализуются строкой без потери сентаво."""
    data = json.loads(JsonFormatter().format(_record("Сверка", excess_received=amount)))

    assert data["excess_received"] == str(amount)
    assert Decimal(data["excess_received"]) == amount


def test_extra_fields_serialization():
    record = _record(
        "Просрочка",
        contract_id="c-1",
        due_date=date(2024, 2, 10),
        status=InstallmentStatus.PENDENTE,
    )

    data = json.loads(JsonFormatter().format(record))

    assert data["contract_id"] == "c-1"
    assert data["due_date"] == "2024-02-10"
    assert data["status"] == "pendente"
    # стандартные атрибуты LogRecord не дублируются
    assert "pathname" not in data
    assert "args" not in data


def test_json_formatter_exception():
    """Ошибки логируются с трейсбеком."""
    formatter = JsonFormatter()

    try:
        raise ValueError("Test exception")
    except ValueError:
        record = _record("Error occurred", logging.ERROR)
        record.exc_info = sys.exc_info()

        data = json.loads(formatter.format(record))

    assert "exception" in data
    assert "ValueError: Test exception" in data["exception"]


def test_setup_logging_creates_session_file(tmp_path, monkeypatch):
    from care_billing.config import settings

    monkeypatch.setattr(settings, "log_file", str(tmp_path / "logs" / "care_billing.log"))
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level

    try:
        log_path = setup_logging()
        logging.getLogger("care_billing.test").info("Проверка записи")
        for handler in root_logger.handlers:
            handler.flush()

        assert log_path.parent == tmp_path / "logs"
        assert log_path.name.startswith("care_billing_")
        lines = log_path.read_text(encoding="utf-8").splitlines()
        messages = [json.loads(line)["message"] for line in lines]
        assert "Проверка записи" in messages
    finally:
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)
