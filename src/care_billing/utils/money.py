"""
Денежные примитивы.

Все суммы хранятся как Decimal с точностью до сентаво (0.01).
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import List, Union

from care_billing.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

MoneyLike = Union[Decimal, int, str, float]


def to_money(value: MoneyLike) -> Decimal:
    """
    Приводит значение к денежному Decimal с двумя знаками после запятой.

    float конвертируется через str, чтобы не тянуть двоичную погрешность.
    Доли сентаво не округляются: сумма должна быть точной.

    Raises:
        ValidationError: Если значение не является числом или содержит доли сентаво

    Example:
        >>> to_money('100')
        Decimal('100.00')
        >>> to_money(0.1)
        Decimal('0.10')
    """
    if isinstance(value, bool):
        raise ValidationError(f"Некорректная сумма: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Некорректная сумма: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Некорректная сумма: {value!r}")
    try:
        money = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Некорректная сумма: {value!r}")
    if money != amount:
        error_msg = f"Сумма {value!r} содержит доли сентаво"
        logger.error(error_msg)
        raise ValidationError(error_msg)
    return money


def split_evenly(total: Decimal, count: int) -> List[Decimal]:
    """
    Делит сумму на count частей без потери копеек.

    Базовая доля усекается до сентаво, последняя часть получает остаток,
    поэтому сумма частей всегда в точности равна total.

    Example:
        >>> split_evenly(Decimal('1000.00'), 3)
        [Decimal('333.33'), Decimal('333.33'), Decimal('333.34')]
    """
    if count < 1:
        raise ValueError(f"Количество частей должно быть >= 1, получено {count}")

    share = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    parts = [share] * (count - 1)
    parts.append(total - share * (count - 1))
    return parts
