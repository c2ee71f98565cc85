"""
Сервис статистики по договорам.

Предоставляет функции для расчёта метрик дашборда:
- Статус договора (quitado / parcial / pendente)
- Просроченные взносы и ближайший срок оплаты
- Сводка по договору для панели деталей
- Итоги по портфелю договоров
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from care_billing.models import (
    Contract, ContractStatus, ContractSummary, Installment
)
from care_billing.utils.money import ZERO

# Настройка логирования
logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')
PERCENT_QUANTUM = Decimal('0.01')


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    value = min(HUNDRED, part / whole * HUNDRED)
    return value.quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def get_contract_status(contract: Contract) -> ContractStatus:
    """
    Статус договора по полученным суммам.

    Example:
        >>> get_contract_status(contract)  # amount_pending == 0
        <ContractStatus.QUITADO: 'quitado'>
    """
    if contract.amount_pending == 0:
        return ContractStatus.QUITADO
    if contract.amount_received > 0:
        return ContractStatus.PARCIAL
    return ContractStatus.PENDENTE


def get_overdue_installments(installments: Iterable[Installment], today: date) -> List[Installment]:
    """
    Неоплаченные взносы со сроком раньше today, по возрастанию номера.
    """
    overdue = [i for i in installments if not i.is_paid and i.due_date < today]
    return sorted(overdue, key=lambda i: i.installment_number)


def get_next_due_installment(installments: Iterable[Installment]) -> Optional[Installment]:
    """
    Ближайший неоплаченный взнос или None, если всё оплачено.
    """
    unpaid = [i for i in installments if not i.is_paid]
    if not unpaid:
        return None
    return min(unpaid, key=lambda i: i.installment_number)


def get_contract_summary(
    contract: Contract,
    installments: List[Installment],
    today: date
) -> ContractSummary:
    """
    Собирает сводку по договору.

    Args:
        contract: Сверенный договор
        installments: Взносы договора
        today: Текущая дата (для просрочки)

    Returns:
        ContractSummary
    """
    overdue = get_overdue_installments(installments, today)
    next_due = get_next_due_installment(installments)
    ordered = sorted(installments, key=lambda i: i.installment_number)

    if ordered:
        installment_value = ordered[0].amount
    else:
        installment_value = contract.total_amount / contract.installment_count

    summary = ContractSummary(
        contract_id=contract.id,
        status=get_contract_status(contract),
        total_amount=contract.total_amount,
        amount_received=contract.amount_received,
        amount_pending=contract.amount_pending,
        excess_received=contract.excess_received,
        progress_percent=_percent(contract.amount_received, contract.total_amount),
        installment_count=contract.installment_count,
        installment_value=installment_value,
        paid_installments=sum(1 for i in installments if i.is_paid),
        overdue_count=len(overdue),
        overdue_amount=sum((i.remaining for i in overdue), ZERO),
        next_due_date=next_due.due_date if next_due else None,
    )

    logger.debug(
        f"Сводка по договору {contract.id}: {summary.status.value}, "
        f"{summary.progress_percent}%, просрочено {summary.overdue_count}"
    )
    return summary


def get_portfolio_totals(contracts: Iterable[Contract]) -> Dict[str, Any]:
    """
    Итоги по набору договоров.

    Returns:
        Словарь:
        {
            "contract_count": количество договоров,
            "total_contracted": сумма договоров,
            "total_received": получено,
            "total_pending": сумма остатков по договорам,
            "default_rate_percent": доля неполученного от суммы договоров
        }
    """
    contracts = list(contracts)
    total_contracted = sum((c.total_amount for c in contracts), ZERO)
    total_received = sum((c.amount_received for c in contracts), ZERO)
    # переплата по одному договору не уменьшает остаток по другим
    total_pending = sum((c.amount_pending for c in contracts), ZERO)

    totals = {
        "contract_count": len(contracts),
        "total_contracted": total_contracted,
        "total_received": total_received,
        "total_pending": total_pending,
        "default_rate_percent": _percent(total_pending, total_contracted),
    }

    logger.info(
        f"Итоги портфеля: договоров={len(contracts)}, "
        f"сумма={total_contracted}, получено={total_received}, остаток={total_pending}"
    )
    return totals
