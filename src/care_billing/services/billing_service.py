"""
Сервис биллинга: точка входа для форм дашборда.

Предоставляет операции над договором и его взносами:
- Создание договора с графиком взносов (cadastro de cliente, lançamento de receita)
- Изменение количества взносов с пересозданием графика
- Регистрация платежа на договор (распределение по взносам)
- Регистрация платежа по конкретному взносу

Все функции чистые: принимают значения и возвращают новые значения
(ContractSchedule). Сохранение выполняет contract_repository одной транзакцией.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Union

from care_billing.config import settings
from care_billing.models import (
    Cadence, CadenceKind, Contract, ContractSchedule, Installment,
    InstallmentStatus, PaymentArrangement, PaymentMethod
)
from care_billing.services import (
    cadence_service, schedule_service, settlement_service, reconciliation_service
)
from care_billing.utils.exceptions import (
    InvalidScheduleError, ValidationError, BusinessLogicError,
    OverpaymentError, InstallmentNotFoundError
)
from care_billing.utils.money import ZERO, MoneyLike, to_money

# Настройка логирования
logger = logging.getLogger(__name__)


def _default_cadence() -> Cadence:
    return Cadence(kind=CadenceKind(settings.default_cadence))


def _resolve_arrangement(arrangement: Union[PaymentArrangement, str]) -> PaymentArrangement:
    try:
        return PaymentArrangement(arrangement)
    except ValueError:
        error_msg = f"Неизвестная схема оплаты: {arrangement!r}"
        logger.error(error_msg)
        raise InvalidScheduleError(error_msg)


def _resolve_count(arrangement: PaymentArrangement, count: Optional[int]) -> int:
    if arrangement == PaymentArrangement.LUMP_SUM:
        if count not in (None, 1):
            error_msg = f"Единовременная оплата допускает ровно 1 взнос, получено {count}"
            logger.error(error_msg)
            raise InvalidScheduleError(error_msg)
        return 1

    if count is None:
        error_msg = "Для оплаты в рассрочку необходимо указать количество взносов"
        logger.error(error_msg)
        raise InvalidScheduleError(error_msg)
    return count


def _sorted(installments: List[Installment]) -> List[Installment]:
    return sorted(installments, key=lambda i: i.installment_number)


def create_contract(
    total_amount: MoneyLike,
    arrangement: Union[PaymentArrangement, str],
    cadence: Optional[Cadence] = None,
    count: Optional[int] = None,
    first_due_date: Optional[date] = None,
    manual_first_paid: bool = False,
    *,
    today: date,
    now: datetime,
    client_id: Optional[str] = None,
    description: Optional[str] = None,
    notes: Optional[str] = None,
    payment_method: PaymentMethod = PaymentMethod.PIX
) -> ContractSchedule:
    """
    Создаёт договор вместе с полным набором взносов.

    График → классификация → сверка. Либо возвращается согласованный
    договор со всеми взносами, либо выбрасывается исключение и ничего не создаётся.

    Args:
        total_amount: Сумма договора (> 0)
        arrangement: lump_sum или installments
        cadence: Периодичность (для рассрочки; по умолчанию settings.default_cadence)
        count: Количество взносов (обязательно для рассрочки)
        first_due_date: Срок первого взноса (по умолчанию today)
        manual_first_paid: Первый взнос уже получен
        today: Текущая дата
        now: Текущий момент (paid_at для оплаченных взносов)
        client_id: ID клиента
        description: Описание
        notes: Примечания
        payment_method: Способ оплаты

    Returns:
        ContractSchedule с договором и взносами

    Raises:
        InvalidScheduleError: Некорректные параметры графика
        ValidationError: Сумма не является числом

    Example:
        >>> result = create_contract(
        ...     Decimal('1000.00'), PaymentArrangement.INSTALLMENTS,
        ...     cadence=Cadence.monthly(), count=3, first_due_date=date(2024, 1, 31),
        ...     today=date(2024, 1, 15), now=datetime(2024, 1, 15, 10, 0)
        ... )
        >>> [str(i.amount) for i in result.installments]
        ['333.33', '333.33', '333.34']
    """
    arrangement = _resolve_arrangement(arrangement)
    count = _resolve_count(arrangement, count)
    amount = to_money(total_amount)

    if cadence is not None:
        cadence_service.validate_cadence(cadence)

    if count > 1 and cadence is None:
        cadence = _default_cadence()
        logger.debug(f"Периодичность не указана, используется {cadence.kind.value}")
    if count == 1:
        cadence = None

    first_due = first_due_date or today

    schedule = schedule_service.generate(amount, count, cadence, first_due)

    contract = Contract(
        client_id=client_id,
        description=description,
        notes=notes,
        payment_method=payment_method,
        total_amount=amount,
        payment_arrangement=arrangement,
        installment_count=count,
        cadence=cadence,
        first_due_date=first_due,
        created_on=today,
        amount_received=ZERO,
        amount_pending=amount,
    )

    settlements = settlement_service.classify(schedule, today, now, manual_first_paid)
    installments = settlement_service.build_installments(contract.id, schedule, settlements)

    reconciliation_service.verify_total_matches(contract, installments)
    contract = reconciliation_service.reconcile(contract, installments)

    logger.info(
        f"Создан договор {contract.id}: {amount} ({arrangement.value}, {count} взн.), "
        f"получено {contract.amount_received}, остаток {contract.amount_pending}"
    )

    return ContractSchedule(contract=contract, installments=installments)


def change_installment_count(
    contract: Contract,
    installments: List[Installment],
    new_count: int,
    *,
    today: date,
    now: datetime,
    cadence: Optional[Cadence] = None,
    confirm_destructive: bool = False
) -> ContractSchedule:
    """
    Пересоздаёт график договора с новым количеством взносов.

    График строится от исходных total_amount и first_due_date договора,
    классификация выполняется на дату вызова и без флага «первый взнос
    получен». Операция не идемпотентна: старые взносы заменяются целиком.

    Args:
        contract: Договор
        installments: Текущие взносы договора
        new_count: Новое количество взносов
        today: Текущая дата
        now: Текущий момент
        cadence: Новая периодичность (по умолчанию текущая договора)
        confirm_destructive: Подтверждение потери истории оплат

    Returns:
        ContractSchedule с новым набором взносов

    Raises:
        InvalidScheduleError: Некорректные параметры графика
        DestructiveRegenerationWarning: Есть оплаченные взносы и нет подтверждения
    """
    if isinstance(new_count, int) and new_count > 1:
        arrangement = PaymentArrangement.INSTALLMENTS
        cadence = cadence or contract.cadence or _default_cadence()
    else:
        if cadence is not None:
            cadence_service.validate_cadence(cadence)
        arrangement = contract.payment_arrangement
        cadence = None

    schedule = schedule_service.generate(
        contract.total_amount, new_count, cadence, contract.first_due_date
    )

    updated = contract.model_copy(update={
        "installment_count": new_count,
        "cadence": cadence,
        "payment_arrangement": arrangement,
    })

    settlements = settlement_service.classify(schedule, today, now, manual_first_paid=False)
    regenerated = settlement_service.build_installments(updated.id, schedule, settlements)

    reconciled = reconciliation_service.replace_schedule(
        updated, installments, regenerated, confirm_destructive=confirm_destructive
    )

    logger.info(
        f"График договора {contract.id} пересоздан: "
        f"{contract.installment_count} → {new_count} взносов"
    )

    return ContractSchedule(contract=reconciled, installments=regenerated)


def _settle(installment: Installment, portion: Decimal, now: datetime) -> Installment:
    """Добавляет оплату к взносу; при полной оплате взнос становится pago."""
    amount_paid = installment.amount_paid + portion
    if amount_paid == installment.amount:
        return installment.model_copy(update={
            "amount_paid": amount_paid,
            "status": InstallmentStatus.PAGO,
            "paid_at": now,
        })
    return installment.model_copy(update={"amount_paid": amount_paid})


def _validate_payment_amount(amount: MoneyLike) -> Decimal:
    value = to_money(amount)
    if value <= 0:
        error_msg = f"Сумма платежа должна быть больше 0, получено {value}"
        logger.error(error_msg)
        raise ValidationError(error_msg)
    return value


def record_manual_payment(
    contract: Contract,
    installments: List[Installment],
    amount: MoneyLike,
    *,
    now: datetime
) -> ContractSchedule:
    """
    Регистрирует платёж на договор без указания взноса.

    Сумма распределяется по неоплаченным взносам начиная с самого раннего,
    не превышая сумму каждого взноса. Частично покрытый взнос остаётся
    pendente с amount_paid > 0.

    Args:
        contract: Договор
        installments: Взносы договора
        amount: Сумма платежа (> 0)
        now: Момент регистрации платежа

    Returns:
        ContractSchedule с обновлёнными взносами и сверенным договором

    Raises:
        ValidationError: Неположительная сумма
        OverpaymentError: Платёж больше неоплаченного остатка по взносам
    """
    value = _validate_payment_amount(amount)
    ordered = _sorted(installments)

    capacity = sum((i.remaining for i in ordered if not i.is_paid), ZERO)
    if value > capacity:
        excess = value - capacity
        error_msg = (
            f"Платёж {value} по договору {contract.id} превышает остаток "
            f"по взносам {capacity} на {excess}"
        )
        logger.error(error_msg)
        raise OverpaymentError(error_msg, excess=excess)

    left = value
    updated = []
    for inst in ordered:
        if left > 0 and not inst.is_paid and inst.remaining > 0:
            portion = min(left, inst.remaining)
            inst = _settle(inst, portion, now)
            left -= portion
            logger.debug(
                f"Договор {contract.id}: взнос {inst.installment_number} "
                f"получил {portion} ({inst.amount_paid}/{inst.amount})"
            )
        updated.append(inst)

    reconciled = reconciliation_service.reconcile(contract, updated)

    logger.info(
        f"Зарегистрирован платёж {value} по договору {contract.id}, "
        f"остаток {reconciled.amount_pending}"
    )

    return ContractSchedule(contract=reconciled, installments=updated)


def record_installment_payment(
    contract: Contract,
    installments: List[Installment],
    installment_number: int,
    amount: Optional[MoneyLike] = None,
    *,
    now: datetime
) -> ContractSchedule:
    """
    Регистрирует платёж по конкретному взносу.

    Args:
        contract: Договор
        installments: Взносы договора
        installment_number: Номер взноса
        amount: Сумма платежа; None означает оплату всего остатка взноса
        now: Момент регистрации платежа

    Returns:
        ContractSchedule с обновлёнными взносами и сверенным договором

    Raises:
        InstallmentNotFoundError: Нет взноса с таким номером
        BusinessLogicError: Взнос уже оплачен
        ValidationError: Неположительная сумма
        OverpaymentError: Сумма больше остатка по взносу
    """
    ordered = _sorted(installments)
    target = next((i for i in ordered if i.installment_number == installment_number), None)
    if target is None:
        error_msg = f"Взнос {installment_number} договора {contract.id} не найден"
        logger.error(error_msg)
        raise InstallmentNotFoundError(error_msg)

    if target.is_paid:
        error_msg = f"Взнос {installment_number} договора {contract.id} уже оплачен"
        logger.error(error_msg)
        raise BusinessLogicError(error_msg)

    value = target.remaining if amount is None else _validate_payment_amount(amount)
    if value > target.remaining:
        excess = value - target.remaining
        error_msg = (
            f"Платёж {value} превышает остаток {target.remaining} "
            f"по взносу {installment_number} договора {contract.id}"
        )
        logger.error(error_msg)
        raise OverpaymentError(error_msg, excess=excess)

    updated = [
        _settle(inst, value, now) if inst.installment_number == installment_number else inst
        for inst in ordered
    ]

    reconciled = reconciliation_service.reconcile(contract, updated)

    logger.info(
        f"Зарегистрирован платёж {value} по взносу {installment_number} "
        f"договора {contract.id}, остаток {reconciled.amount_pending}"
    )

    return ContractSchedule(contract=reconciled, installments=updated)
