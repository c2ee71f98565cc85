"""
Сервис классификации взносов при создании графика.

Правила:
- срок взноса уже прошёл (due_date < today): взнос считается оплаченным;
- флаг «entrada já recebida»: первый взнос оплачен, даже если срок сегодня или позже;
- остальные взносы ожидают оплаты.

today и now передаются явно, часы системы здесь не читаются.
"""

import logging
from datetime import date, datetime
from typing import List

from care_billing.models import (
    ScheduleEntry, Settlement, Installment, InstallmentStatus
)
from care_billing.utils.exceptions import ScheduleIntegrityError
from care_billing.utils.money import ZERO

# Настройка логирования
logger = logging.getLogger(__name__)


def classify(
    schedule: List[ScheduleEntry],
    today: date,
    now: datetime,
    manual_first_paid: bool = False
) -> List[Settlement]:
    """
    Определяет, какие взносы уже оплачены на момент создания графика.

    Args:
        schedule: График взносов
        today: Текущая дата
        now: Текущий момент (для paid_at)
        manual_first_paid: Первый взнос уже получен

    Returns:
        Список Settlement в порядке графика
    """
    settlements = []
    for entry in schedule:
        is_settled = entry.due_date < today or (manual_first_paid and entry.number == 1)
        if is_settled:
            settlements.append(Settlement(
                number=entry.number,
                paid_amount=entry.amount,
                status=InstallmentStatus.PAGO,
                paid_at=now,
            ))
        else:
            settlements.append(Settlement(
                number=entry.number,
                paid_amount=ZERO,
                status=InstallmentStatus.PENDENTE,
                paid_at=None,
            ))

    paid_count = sum(1 for s in settlements if s.status == InstallmentStatus.PAGO)
    logger.debug(f"Классификация: {paid_count} из {len(settlements)} взносов считаются оплаченными")
    return settlements


def build_installments(
    contract_id: str,
    schedule: List[ScheduleEntry],
    settlements: List[Settlement]
) -> List[Installment]:
    """
    Собирает взносы договора из графика и результата классификации.

    Raises:
        ScheduleIntegrityError: Если номера графика и классификации не совпадают
    """
    if [e.number for e in schedule] != [s.number for s in settlements]:
        error_msg = f"Классификация не соответствует графику договора {contract_id}"
        logger.error(error_msg)
        raise ScheduleIntegrityError(error_msg)

    total = len(schedule)
    return [
        Installment(
            contract_id=contract_id,
            installment_number=entry.number,
            total_installments=total,
            amount=entry.amount,
            amount_paid=settlement.paid_amount,
            due_date=entry.due_date,
            status=settlement.status,
            paid_at=settlement.paid_at,
        )
        for entry, settlement in zip(schedule, settlements)
    ]
