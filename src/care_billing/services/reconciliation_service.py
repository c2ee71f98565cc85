"""
Сервис сверки договора с его взносами.

Единственное место, где записываются amount_received и amount_pending:
- amount_received = сумма amount_paid по всем взносам
- amount_pending = max(0, total_amount - amount_received)

Также проверяет инварианты набора взносов и требует явного подтверждения
пересоздания графика, если оно уничтожает историю оплат.
"""

import logging
import warnings
from decimal import Decimal
from typing import List, Tuple

from care_billing.models import Contract, Installment, InstallmentStatus
from care_billing.utils.exceptions import (
    ScheduleIntegrityError, DestructiveRegenerationWarning
)
from care_billing.utils.money import ZERO

# Настройка логирования
logger = logging.getLogger(__name__)


def _integrity_error(message: str) -> ScheduleIntegrityError:
    logger.error(message)
    return ScheduleIntegrityError(message)


def verify_schedule_integrity(contract: Contract, installments: List[Installment]) -> None:
    """
    Проверяет инварианты набора взносов договора.

    - все взносы принадлежат договору;
    - номера 1..installment_count без пропусков и повторов;
    - 0 <= amount_paid <= amount;
    - статус pago тогда и только тогда, когда взнос оплачен полностью,
      paid_at заполнен тогда и только тогда, когда статус pago.

    Совпадение суммы взносов с суммой договора проверяет verify_total_matches.

    Raises:
        ScheduleIntegrityError: При нарушении любого инварианта
    """
    foreign = [i.installment_number for i in installments if i.contract_id != contract.id]
    if foreign:
        raise _integrity_error(
            f"Взносы {foreign} не принадлежат договору {contract.id}"
        )

    numbers = sorted(i.installment_number for i in installments)
    expected = list(range(1, contract.installment_count + 1))
    if numbers != expected:
        raise _integrity_error(
            f"Нумерация взносов договора {contract.id} нарушена: "
            f"ожидалось 1..{contract.installment_count}, получено {numbers}"
        )

    for inst in installments:
        if inst.amount_paid < 0 or inst.amount_paid > inst.amount:
            raise _integrity_error(
                f"Взнос {inst.installment_number} договора {contract.id}: "
                f"оплачено {inst.amount_paid} при сумме {inst.amount}"
            )
        fully_paid = inst.amount_paid == inst.amount
        if (inst.status == InstallmentStatus.PAGO) != fully_paid:
            raise _integrity_error(
                f"Взнос {inst.installment_number} договора {contract.id}: "
                f"статус {inst.status.value} не соответствует оплате {inst.amount_paid}/{inst.amount}"
            )
        if (inst.paid_at is not None) != (inst.status == InstallmentStatus.PAGO):
            raise _integrity_error(
                f"Взнос {inst.installment_number} договора {contract.id}: "
                f"paid_at не соответствует статусу {inst.status.value}"
            )


def verify_total_matches(contract: Contract, installments: List[Installment]) -> None:
    """
    Проверяет, что сумма взносов в точности равна сумме договора.

    Raises:
        ScheduleIntegrityError: Если суммы расходятся
    """
    scheduled_total = sum((i.amount for i in installments), ZERO)
    if scheduled_total != contract.total_amount:
        raise _integrity_error(
            f"Сумма взносов договора {contract.id} ({scheduled_total}) "
            f"не равна сумме договора ({contract.total_amount})"
        )


def reconcile(contract: Contract, installments: List[Installment]) -> Contract:
    """
    Пересчитывает полученную сумму и остаток договора по его взносам.

    Суммы взносов могли быть изменены вне ядра (форма оплаты), поэтому
    расхождение суммы графика с суммой договора здесь не ошибка, а
    предупреждение. Если получено больше суммы договора, остаток
    обнуляется, а переплата остаётся видна в Contract.excess_received и в логе.

    Args:
        contract: Договор
        installments: Полный набор взносов договора

    Returns:
        Новый объект Contract с актуальными amount_received/amount_pending

    Raises:
        ScheduleIntegrityError: Если набор взносов нарушает инварианты
    """
    verify_schedule_integrity(contract, installments)

    scheduled_total = sum((i.amount for i in installments), ZERO)
    if scheduled_total != contract.total_amount:
        logger.warning(
            f"Договор {contract.id}: сумма взносов {scheduled_total} "
            f"не равна сумме договора {contract.total_amount}"
        )

    received = sum((i.amount_paid for i in installments), ZERO)
    pending = contract.total_amount - received

    if pending < 0:
        logger.warning(
            f"Договор {contract.id}: получено {received} при сумме {contract.total_amount}, "
            f"переплата {-pending}",
            extra={"contract_id": contract.id, "excess_received": -pending},
        )
        pending = ZERO

    reconciled = contract.model_copy(update={
        "amount_received": received,
        "amount_pending": pending,
    })

    logger.debug(
        f"Сверка договора {contract.id}: получено {received}, остаток {pending}"
    )
    return reconciled


def count_paid_history(installments: List[Installment]) -> Tuple[int, Decimal]:
    """
    Возвращает (количество взносов с оплатой, сумма оплат).
    """
    paid = [i for i in installments if i.amount_paid > 0]
    return len(paid), sum((i.amount_paid for i in paid), ZERO)


def replace_schedule(
    contract: Contract,
    previous: List[Installment],
    regenerated: List[Installment],
    confirm_destructive: bool = False
) -> Contract:
    """
    Сверяет договор с пересозданным набором взносов.

    Пересоздание удаляет старые записи взносов безвозвратно. Если среди них
    есть оплаченные, операция требует confirm_destructive=True.

    Args:
        contract: Договор с обновлёнными installment_count/cadence
        previous: Текущий набор взносов (будет удалён)
        regenerated: Новый набор взносов
        confirm_destructive: Вызывающий подтверждает потерю истории оплат

    Returns:
        Сверенный договор

    Raises:
        DestructiveRegenerationWarning: Есть история оплат и нет подтверждения
        ScheduleIntegrityError: Новый набор нарушает инварианты
    """
    paid_count, discarded = count_paid_history(previous)

    if paid_count:
        warning = DestructiveRegenerationWarning(contract.id, paid_count, discarded)
        if not confirm_destructive:
            logger.warning(f"{warning} (требуется подтверждение)")
            raise warning

        logger.warning(
            str(warning),
            extra={"contract_id": contract.id, "discarded_amount": discarded},
        )
        warnings.warn(warning, stacklevel=3)

    verify_total_matches(contract, regenerated)
    return reconcile(contract, regenerated)
