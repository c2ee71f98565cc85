"""
Хранилище договоров и взносов.

Связывает чистые операции billing_service с базой данных:
- Загрузка договора вместе с взносами
- Сохранение договора и полного набора взносов одной транзакцией
- Операции дашборда по ID договора (создание, изменение количества взносов,
  регистрация платежей)
- Выборка просроченных взносов

Каждая операция записи коммитится целиком или откатывается целиком.
Значения today/now по умолчанию берутся здесь, на границе с ядром.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from care_billing.models import (
    Cadence, Contract, ContractCreate, ContractDB, ContractSchedule,
    Installment, InstallmentDB, InstallmentStatus
)
from care_billing.services import billing_service
from care_billing.utils.exceptions import (
    CareBillingError, ContractNotFoundError, DatabaseError
)
from care_billing.utils.money import MoneyLike, to_money
from care_billing.utils.validation import validate_uuid_format

# Настройка логирования
logger = logging.getLogger(__name__)


def _contract_from_row(row: ContractDB) -> Contract:
    cadence = None
    if row.cadence_kind is not None:
        cadence = Cadence(kind=row.cadence_kind, days=row.cadence_days)

    return Contract(
        id=row.id,
        client_id=row.client_id,
        description=row.description,
        notes=row.notes,
        payment_method=row.payment_method,
        total_amount=to_money(row.total_amount),
        payment_arrangement=row.payment_arrangement,
        installment_count=row.installment_count,
        cadence=cadence,
        first_due_date=row.first_due_date,
        created_on=row.created_on,
        amount_received=to_money(row.amount_received),
        amount_pending=to_money(row.amount_pending),
    )


def _installment_from_row(row: InstallmentDB) -> Installment:
    return Installment.model_validate(row).model_copy(update={
        "amount": to_money(row.amount),
        "amount_paid": to_money(row.amount_paid),
    })


def _apply_contract(row: ContractDB, contract: Contract) -> None:
    row.client_id = contract.client_id
    row.description = contract.description
    row.notes = contract.notes
    row.payment_method = contract.payment_method
    row.total_amount = contract.total_amount
    row.payment_arrangement = contract.payment_arrangement
    row.installment_count = contract.installment_count
    row.cadence_kind = contract.cadence.kind if contract.cadence else None
    row.cadence_days = contract.cadence.days if contract.cadence else None
    row.first_due_date = contract.first_due_date
    row.created_on = contract.created_on
    row.amount_received = contract.amount_received
    row.amount_pending = contract.amount_pending


def _apply_installment(row: InstallmentDB, installment: Installment) -> None:
    row.installment_number = installment.installment_number
    row.total_installments = installment.total_installments
    row.amount = installment.amount
    row.amount_paid = installment.amount_paid
    row.due_date = installment.due_date
    row.status = installment.status
    row.paid_at = installment.paid_at


def _get_contract_row(session: Session, contract_id: str) -> ContractDB:
    validate_uuid_format(contract_id, "ID договора")
    row = session.get(ContractDB, contract_id)
    if row is None:
        error_msg = f"Договор ID {contract_id} не найден"
        logger.error(error_msg)
        raise ContractNotFoundError(error_msg)
    return row


def get_contract_schedule(session: Session, contract_id: str) -> ContractSchedule:
    """
    Загружает договор вместе со всеми взносами.

    Args:
        session: Активная сессия БД
        contract_id: ID договора

    Returns:
        ContractSchedule

    Raises:
        ValueError: Некорректный формат ID
        ContractNotFoundError: Договор не найден
        DatabaseError: При ошибках работы с БД
    """
    try:
        row = _get_contract_row(session, contract_id)
        installments = [_installment_from_row(i) for i in row.installments]
        return ContractSchedule(contract=_contract_from_row(row), installments=installments)

    except SQLAlchemyError as e:
        error_msg = f"Ошибка при загрузке договора ID {contract_id}: {e}"
        logger.error(error_msg)
        raise DatabaseError(error_msg) from e


def list_contracts(session: Session, client_id: Optional[str] = None) -> List[Contract]:
    """
    Возвращает договоры, опционально только одного клиента.

    Raises:
        DatabaseError: При ошибках работы с БД
    """
    try:
        query = session.query(ContractDB)
        if client_id is not None:
            query = query.filter(ContractDB.client_id == client_id)
        rows = query.order_by(ContractDB.created_on).all()

        logger.info(
            f"Получено {len(rows)} договоров"
            f"{f' клиента {client_id}' if client_id else ''}"
        )
        return [_contract_from_row(r) for r in rows]

    except SQLAlchemyError as e:
        error_msg = f"Ошибка при получении договоров: {e}"
        logger.error(error_msg)
        raise DatabaseError(error_msg) from e


def _write_schedule(session: Session, schedule: ContractSchedule, replace_installments: bool) -> None:
    contract = schedule.contract
    row = session.get(ContractDB, contract.id)
    if row is None:
        row = ContractDB(id=contract.id)
        session.add(row)
    _apply_contract(row, contract)

    if replace_installments and row.installments:
        # delete-orphan удаляет старые строки; flush до вставки новых из-за
        # уникальности (contract_id, installment_number)
        row.installments.clear()
        session.flush()

    existing = {i.id: i for i in row.installments}
    for installment in schedule.installments:
        inst_row = existing.get(installment.id)
        if inst_row is None:
            inst_row = InstallmentDB(id=installment.id, contract_id=contract.id)
            row.installments.append(inst_row)
        _apply_installment(inst_row, installment)


def save_contract_schedule(
    session: Session,
    schedule: ContractSchedule,
    replace_installments: bool = False
) -> ContractSchedule:
    """
    Сохраняет договор и его взносы одной транзакцией.

    Args:
        session: Активная сессия БД
        schedule: Договор со взносами
        replace_installments: Удалить все текущие взносы перед вставкой

    Returns:
        Сохранённый ContractSchedule

    Raises:
        DatabaseError: При ошибках работы с БД (транзакция откатывается)
    """
    try:
        _write_schedule(session, schedule, replace_installments)
        session.commit()

        logger.info(
            f"Сохранён договор ID {schedule.contract.id} "
            f"({len(schedule.installments)} взносов)"
        )
        return schedule

    except SQLAlchemyError as e:
        session.rollback()
        error_msg = f"Ошибка при сохранении договора ID {schedule.contract.id}: {e}"
        logger.error(error_msg)
        raise DatabaseError(error_msg) from e


def create_contract_record(
    session: Session,
    data: ContractCreate,
    today: Optional[date] = None,
    now: Optional[datetime] = None
) -> ContractSchedule:
    """
    Создаёт и сохраняет договор с графиком взносов.

    Args:
        session: Активная сессия БД
        data: Данные договора
        today: Текущая дата (по умолчанию date.today())
        now: Текущий момент (по умолчанию datetime.now())

    Returns:
        Сохранённый ContractSchedule

    Raises:
        InvalidScheduleError: Некорректные параметры графика
        DatabaseError: При ошибках работы с БД
    """
    schedule = billing_service.create_contract(
        data.total_amount,
        data.payment_arrangement,
        cadence=data.cadence,
        count=data.installment_count,
        first_due_date=data.first_due_date,
        manual_first_paid=data.manual_first_paid,
        today=today or date.today(),
        now=now or datetime.now(),
        client_id=data.client_id,
        description=data.description,
        notes=data.notes,
        payment_method=data.payment_method,
    )
    return save_contract_schedule(session, schedule)


def change_installment_count_by_id(
    session: Session,
    contract_id: str,
    new_count: int,
    cadence: Optional[Cadence] = None,
    confirm_destructive: bool = False,
    today: Optional[date] = None,
    now: Optional[datetime] = None
) -> ContractSchedule:
    """
    Пересоздаёт график договора и заменяет взносы в БД.

    Старые записи взносов удаляются в той же транзакции, в которой
    сохраняется новый набор и сверенный договор.

    Raises:
        ContractNotFoundError: Договор не найден
        InvalidScheduleError: Некорректное количество или периодичность
        DestructiveRegenerationWarning: Есть история оплат и нет подтверждения
        DatabaseError: При ошибках работы с БД
    """
    try:
        current = get_contract_schedule(session, contract_id)
        regenerated = billing_service.change_installment_count(
            current.contract,
            current.installments,
            new_count,
            today=today or date.today(),
            now=now or datetime.now(),
            cadence=cadence,
            confirm_destructive=confirm_destructive,
        )
    except CareBillingError:
        session.rollback()
        raise

    return save_contract_schedule(session, regenerated, replace_installments=True)


def record_payment_by_id(
    session: Session,
    contract_id: str,
    amount: MoneyLike,
    now: Optional[datetime] = None
) -> ContractSchedule:
    """
    Регистрирует платёж на договор и сохраняет результат.

    Raises:
        ContractNotFoundError: Договор не найден
        ValidationError: Неположительная сумма
        OverpaymentError: Платёж больше остатка
        DatabaseError: При ошибках работы с БД
    """
    try:
        current = get_contract_schedule(session, contract_id)
        updated = billing_service.record_manual_payment(
            current.contract, current.installments, amount, now=now or datetime.now()
        )
    except CareBillingError:
        session.rollback()
        raise

    return save_contract_schedule(session, updated)


def record_installment_payment_by_id(
    session: Session,
    contract_id: str,
    installment_number: int,
    amount: Optional[MoneyLike] = None,
    now: Optional[datetime] = None
) -> ContractSchedule:
    """
    Регистрирует платёж по взносу и сохраняет результат.

    Raises:
        ContractNotFoundError: Договор не найден
        InstallmentNotFoundError: Взнос не найден
        OverpaymentError: Сумма больше остатка по взносу
        DatabaseError: При ошибках работы с БД
    """
    try:
        current = get_contract_schedule(session, contract_id)
        updated = billing_service.record_installment_payment(
            current.contract,
            current.installments,
            installment_number,
            amount,
            now=now or datetime.now(),
        )
    except CareBillingError:
        session.rollback()
        raise

    return save_contract_schedule(session, updated)


def get_overdue_installment_rows(
    session: Session,
    today: Optional[date] = None,
    client_id: Optional[str] = None
) -> List[Installment]:
    """
    Неоплаченные взносы со сроком раньше today.

    Args:
        session: Активная сессия БД
        today: Текущая дата (по умолчанию date.today())
        client_id: Только взносы договоров клиента

    Returns:
        Список взносов, отсортированных по сроку

    Raises:
        DatabaseError: При ошибках работы с БД
    """
    today = today or date.today()
    try:
        query = session.query(InstallmentDB).filter(
            InstallmentDB.status != InstallmentStatus.PAGO,
            InstallmentDB.due_date < today
        )
        if client_id is not None:
            query = query.join(ContractDB).filter(ContractDB.client_id == client_id)

        rows = query.order_by(InstallmentDB.due_date, InstallmentDB.installment_number).all()

        logger.info(f"Найдено {len(rows)} просроченных взносов на {today}")
        return [_installment_from_row(r) for r in rows]

    except SQLAlchemyError as e:
        error_msg = f"Ошибка при получении просроченных взносов: {e}"
        logger.error(error_msg)
        raise DatabaseError(error_msg) from e
