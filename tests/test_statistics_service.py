"""
Тесты статистики по договорам.
"""
from datetime import date
from decimal import Decimal

from care_billing.models import ContractStatus, PaymentArrangement, Cadence, Contract
from care_billing.services import billing_service
from care_billing.services.statistics_service import (
    get_contract_status, get_overdue_installments, get_next_due_installment,
    get_contract_summary, get_portfolio_totals
)


class TestContractStatus:

    def test_partial(self, three_installment_schedule):
        assert get_contract_status(three_installment_schedule.contract) == ContractStatus.PARCIAL

    def test_pending(self, today, now):
        result = billing_service.create_contract(
            Decimal('100.00'), PaymentArrangement.LUMP_SUM,
            first_due_date=date(2024, 5, 1), today=today, now=now,
        )
        assert get_contract_status(result.contract) == ContractStatus.PENDENTE

    def test_settled(self, three_installment_schedule, now):
        result = billing_service.record_manual_payment(
            three_installment_schedule.contract,
            three_installment_schedule.installments,
            Decimal('200.00'), now=now,
        )
        assert get_contract_status(result.contract) == ContractStatus.QUITADO


class TestOverdue:
    """Просроченные взносы."""

    def test_unpaid_before_today(self, three_installment_schedule):
        # сроки 2024-02-10 и 2024-03-10
        overdue = get_overdue_installments(
            three_installment_schedule.installments, date(2024, 3, 1)
        )
        assert [i.installment_number for i in overdue] == [2]

    def test_due_today_is_not_overdue(self, three_installment_schedule):
        overdue = get_overdue_installments(
            three_installment_schedule.installments, date(2024, 2, 10)
        )
        assert overdue == []

    def test_next_due(self, three_installment_schedule):
        next_due = get_next_due_installment(three_installment_schedule.installments)
        assert next_due.installment_number == 2

    def test_next_due_when_all_paid(self, three_installment_schedule, now):
        result = billing_service.record_manual_payment(
            three_installment_schedule.contract,
            three_installment_schedule.installments,
            Decimal('200.00'), now=now,
        )
        assert get_next_due_installment(result.installments) is None


class TestContractSummary:

    def test_summary_fields(self, three_installment_schedule, now):
        result = billing_service.record_manual_payment(
            three_installment_schedule.contract,
            three_installment_schedule.installments,
            Decimal('30.00'), now=now,
        )

        summary = get_contract_summary(result.contract, result.installments, date(2024, 3, 1))

        assert summary.status == ContractStatus.PARCIAL
        assert summary.amount_received == Decimal('130.00')
        assert summary.amount_pending == Decimal('170.00')
        assert summary.progress_percent == Decimal('43.33')
        assert summary.installment_count == 3
        assert summary.installment_value == Decimal('100.00')
        assert summary.paid_installments == 1
        assert summary.overdue_count == 1
        # по просроченному взносу учитывается только неоплаченная часть
        assert summary.overdue_amount == Decimal('70.00')
        assert summary.next_due_date == date(2024, 2, 10)
        assert summary.excess_received == Decimal('0.00')


class TestPortfolioTotals:

    def test_totals(self, today, now):
        first = billing_service.create_contract(
            Decimal('300.00'), PaymentArrangement.INSTALLMENTS,
            cadence=Cadence.monthly(), count=3, first_due_date=date(2024, 1, 10),
            today=today, now=now,
        )
        second = billing_service.create_contract(
            Decimal('100.00'), PaymentArrangement.LUMP_SUM,
            first_due_date=date(2024, 1, 5), today=today, now=now,
        )

        totals = get_portfolio_totals([first.contract, second.contract])

        assert totals["contract_count"] == 2
        assert totals["total_contracted"] == Decimal('400.00')
        assert totals["total_received"] == Decimal('200.00')
        assert totals["total_pending"] == Decimal('200.00')
        assert totals["default_rate_percent"] == Decimal('50.00')

    def test_empty(self):
        totals = get_portfolio_totals([])
        assert totals["contract_count"] == 0
        assert totals["default_rate_percent"] == Decimal('0.00')

    def test_excess_does_not_offset_other_contracts(self, today):
        """Переплата 50.00 по одному договору при остатке 80.00 по другому."""
        overpaid = Contract(
            total_amount=Decimal('100.00'), payment_arrangement=PaymentArrangement.LUMP_SUM,
            installment_count=1, first_due_date=date(2024, 1, 5), created_on=today,
            amount_received=Decimal('150.00'), amount_pending=Decimal('0.00'),
        )
        pending = Contract(
            total_amount=Decimal('100.00'), payment_arrangement=PaymentArrangement.LUMP_SUM,
            installment_count=1, first_due_date=date(2024, 1, 5), created_on=today,
            amount_received=Decimal('20.00'), amount_pending=Decimal('80.00'),
        )

        totals = get_portfolio_totals([overpaid, pending])

        assert totals["total_received"] == Decimal('170.00')
        assert totals["total_pending"] == Decimal('80.00')
        assert totals["default_rate_percent"] == Decimal('40.00')
