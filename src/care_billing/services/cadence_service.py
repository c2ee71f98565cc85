"""
Сервис периодичности взносов.

Вычисляет смещение срока взноса от даты первого взноса:
- weekly: 7 дней на шаг
- biweekly: 15 дней на шаг (quinzenal)
- custom(N): N дней на шаг
- monthly: календарные месяцы, а не 30 дней
"""

import logging
from datetime import date, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from care_billing.models import Cadence, CadenceKind
from care_billing.utils.exceptions import InvalidScheduleError

# Настройка логирования
logger = logging.getLogger(__name__)

# Фиксированный шаг в днях для периодичностей с постоянным шагом
FIXED_STEP_DAYS = {
    CadenceKind.WEEKLY: 7,
    CadenceKind.BIWEEKLY: 15,
}


def _out_of_range(start: date, error: Exception) -> InvalidScheduleError:
    error_msg = f"Срок взноса от {start} выходит за пределы календаря: {error}"
    logger.error(error_msg)
    return InvalidScheduleError(error_msg)


def validate_cadence(cadence: Cadence) -> None:
    """
    Проверяет корректность периодичности.

    Raises:
        InvalidScheduleError: Если для CUSTOM шаг не положительное целое
    """
    if cadence.kind == CadenceKind.CUSTOM:
        if cadence.days is None or isinstance(cadence.days, bool) or cadence.days <= 0:
            error_msg = f"Шаг кастомной периодичности должен быть положительным, получено {cadence.days}"
            logger.error(error_msg)
            raise InvalidScheduleError(error_msg)


def add_calendar_months(start: date, months: int) -> date:
    """
    Сдвигает дату на months календарных месяцев.

    День месяца сохраняется, если он существует в целевом месяце,
    иначе берётся последний день месяца.

    Example:
        >>> add_calendar_months(date(2024, 1, 31), 1)
        datetime.date(2024, 2, 29)
        >>> add_calendar_months(date(2024, 1, 31), 2)
        datetime.date(2024, 3, 31)

    Raises:
        InvalidScheduleError: Если результат выходит за пределы календаря
    """
    try:
        return start + relativedelta(months=months)
    except (OverflowError, ValueError) as e:
        raise _out_of_range(start, e) from e


def offset_days(cadence: Cadence, index: int, first_due_date: Optional[date] = None) -> int:
    """
    Возвращает смещение в днях срока взноса index от первого срока.

    index начинается с 0 и соответствует installment_number - 1.
    Для MONTHLY шаг не фиксирован, поэтому нужна опорная дата first_due_date.

    Raises:
        InvalidScheduleError: Некорректная периодичность, отрицательный index
            или MONTHLY без опорной даты
    """
    if index < 0:
        raise InvalidScheduleError(f"Индекс взноса не может быть отрицательным: {index}")

    validate_cadence(cadence)

    if cadence.kind in FIXED_STEP_DAYS:
        return FIXED_STEP_DAYS[cadence.kind] * index

    if cadence.kind == CadenceKind.CUSTOM:
        return cadence.days * index

    if cadence.kind == CadenceKind.MONTHLY:
        if first_due_date is None:
            raise InvalidScheduleError(
                "Для ежемесячной периодичности смещение зависит от даты первого взноса"
            )
        return (add_calendar_months(first_due_date, index) - first_due_date).days

    error_msg = f"Неизвестная периодичность: {cadence.kind}"
    logger.error(error_msg)
    raise InvalidScheduleError(error_msg)


def due_date_for(cadence: Cadence, first_due_date: date, index: int) -> date:
    """
    Срок взноса с индексом index (с 0).

    Для MONTHLY дата всегда считается от first_due_date, а не от
    предыдущего срока, чтобы 31-е число не «съезжало» после февраля.

    Raises:
        InvalidScheduleError: Некорректная периодичность или срок за пределами календаря
    """
    if cadence.kind == CadenceKind.MONTHLY:
        if index < 0:
            raise InvalidScheduleError(f"Индекс взноса не может быть отрицательным: {index}")
        return add_calendar_months(first_due_date, index)

    days = offset_days(cadence, index)
    try:
        return first_due_date + timedelta(days=days)
    except (OverflowError, ValueError) as e:
        raise _out_of_range(first_due_date, e) from e
