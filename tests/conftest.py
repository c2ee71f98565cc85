"""
Конфигурация pytest для тестов care_billing.
"""
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from datetime import date, datetime
from decimal import Decimal

from care_billing.models import Base, Cadence, PaymentArrangement
from care_billing.services import billing_service


TODAY = date(2024, 1, 20)
NOW = datetime(2024, 1, 20, 14, 30)


@pytest.fixture
def db_session():
    """
    Временная БД в памяти и сессия.
    Автоматически закрывает соединение после теста.
    """
    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def three_installment_schedule():
    """
    Договор на 300.00 в 3 ежемесячных взноса по 100.00.

    Первый срок (2024-01-10) уже прошёл на TODAY, поэтому взнос 1 оплачен,
    взносы 2 и 3 ожидают оплаты.
    """
    return billing_service.create_contract(
        Decimal('300.00'),
        PaymentArrangement.INSTALLMENTS,
        cadence=Cadence.monthly(),
        count=3,
        first_due_date=date(2024, 1, 10),
        today=TODAY,
        now=NOW,
    )
