"""
Сервис построения графика взносов.

Строит упорядоченный список (номер, срок, сумма) для договора.
Сумма делится поровну с точностью до сентаво, остаток от деления
получает последний взнос, поэтому сумма графика всегда равна сумме договора.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from care_billing.models import Cadence, ScheduleEntry
from care_billing.services.cadence_service import validate_cadence, due_date_for
from care_billing.utils.exceptions import InvalidScheduleError
from care_billing.utils.money import CENT, split_evenly, to_money

# Настройка логирования
logger = logging.getLogger(__name__)


def validate_schedule_params(total_amount: Decimal, count: int, cadence: Optional[Cadence]) -> None:
    """
    Проверяет параметры графика до создания каких-либо записей.

    Raises:
        InvalidScheduleError: Если параметры не позволяют построить график
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        error_msg = f"Количество взносов должно быть целым >= 1, получено {count!r}"
        logger.error(error_msg)
        raise InvalidScheduleError(error_msg)

    if total_amount <= 0:
        error_msg = f"Сумма договора должна быть больше 0, получено {total_amount}"
        logger.error(error_msg)
        raise InvalidScheduleError(error_msg)

    if cadence is not None:
        validate_cadence(cadence)

    if count > 1:
        if cadence is None:
            error_msg = f"Для {count} взносов необходимо указать периодичность"
            logger.error(error_msg)
            raise InvalidScheduleError(error_msg)

        # Каждый взнос должен быть хотя бы на одно сентаво
        if total_amount < CENT * count:
            error_msg = (
                f"Сумма {total_amount} слишком мала для {count} взносов "
                f"(минимум {CENT * count})"
            )
            logger.error(error_msg)
            raise InvalidScheduleError(error_msg)


def generate(
    total_amount: Decimal,
    count: int,
    cadence: Optional[Cadence],
    first_due_date: date
) -> List[ScheduleEntry]:
    """
    Строит график взносов.

    Args:
        total_amount: Сумма договора (> 0)
        count: Количество взносов (>= 1)
        cadence: Периодичность (игнорируется при count == 1)
        first_due_date: Срок первого взноса

    Returns:
        Список ScheduleEntry, упорядоченный по номеру

    Raises:
        InvalidScheduleError: При некорректных параметрах

    Example:
        >>> entries = generate(Decimal('1000.00'), 3, Cadence.monthly(), date(2024, 1, 31))
        >>> [e.due_date.isoformat() for e in entries]
        ['2024-01-31', '2024-02-29', '2024-03-31']
        >>> [str(e.amount) for e in entries]
        ['333.33', '333.33', '333.34']
    """
    total_amount = to_money(total_amount)
    validate_schedule_params(total_amount, count, cadence)

    if count == 1:
        logger.debug(f"Единовременный график: {total_amount} на {first_due_date}")
        return [ScheduleEntry(number=1, due_date=first_due_date, amount=total_amount)]

    amounts = split_evenly(total_amount, count)
    entries = [
        ScheduleEntry(
            number=index + 1,
            due_date=due_date_for(cadence, first_due_date, index),
            amount=amount,
        )
        for index, amount in enumerate(amounts)
    ]

    logger.debug(
        f"Построен график из {count} взносов ({cadence.kind.value}) "
        f"с {entries[0].due_date} по {entries[-1].due_date}"
    )
    return entries
