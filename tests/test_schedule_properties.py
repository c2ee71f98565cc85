"""
Property-based тесты построения графика взносов.

Тестирует:
- Сумма взносов равна сумме договора без расхождения в копейках
- Сроки строго возрастают для всех периодичностей
- Единовременная оплата даёт один взнос на дату первого срока
- Отказ при некорректных параметрах
"""
import pytest
from datetime import date
from decimal import Decimal
from hypothesis import given, strategies as st, settings

from care_billing.models import Cadence
from care_billing.services.schedule_service import generate
from care_billing.utils.exceptions import InvalidScheduleError

# --- Strategies ---
amounts = st.decimals(
    min_value=Decimal('1.00'), max_value=Decimal('100000.00'), places=2,
    allow_nan=False, allow_infinity=False
)
counts = st.integers(min_value=1, max_value=24)
cadences = st.one_of(
    st.just(Cadence.weekly()),
    st.just(Cadence.biweekly()),
    st.just(Cadence.monthly()),
    st.integers(min_value=1, max_value=90).map(Cadence.custom),
)
first_dates = st.dates(min_value=date(2000, 1, 1), max_value=date(2090, 12, 31))


class TestScheduleProperties:
    """Property-based тесты графика."""

    @given(total=amounts, count=counts, cadence=cadences, first_due=first_dates)
    @settings(max_examples=200, deadline=None)
    def test_amounts_sum_to_total(self, total, count, cadence, first_due):
        """Сумма взносов в точности равна сумме договора."""
        schedule = generate(total, count, cadence, first_due)

        assert len(schedule) == count
        assert sum(e.amount for e in schedule) == total
        assert all(e.amount > 0 for e in schedule)

    @given(total=amounts, count=st.integers(min_value=2, max_value=24),
           cadence=cadences, first_due=first_dates)
    @settings(max_examples=200, deadline=None)
    def test_due_dates_strictly_increase(self, total, count, cadence, first_due):
        """Сроки строго возрастают с номером взноса."""
        schedule = generate(total, count, cadence, first_due)

        assert schedule[0].due_date == first_due
        for current, following in zip(schedule, schedule[1:]):
            assert current.due_date < following.due_date

    @given(total=amounts, count=counts, cadence=cadences, first_due=first_dates)
    @settings(max_examples=100, deadline=None)
    def test_numbers_are_contiguous(self, total, count, cadence, first_due):
        """Номера взносов 1..count без пропусков."""
        schedule = generate(total, count, cadence, first_due)
        assert [e.number for e in schedule] == list(range(1, count + 1))

    @pytest.mark.parametrize("total, count", [
        (Decimal('100.00'), 3),
        (Decimal('0.10'), 3),
        (Decimal('1000.00'), 7),
        (Decimal('99.99'), 24),
        (Decimal('0.24'), 24),
    ])
    def test_non_divisible_totals(self, total, count):
        schedule = generate(total, count, Cadence.monthly(), date(2024, 1, 1))
        assert sum(e.amount for e in schedule) == total
        # остаток попадает только в последний взнос
        assert len({e.amount for e in schedule[:-1]}) == 1
        assert schedule[-1].amount >= schedule[0].amount


class TestScheduleExamples:
    """Конкретные сценарии."""

    def test_monthly_leap_year(self):
        schedule = generate(Decimal('1000.00'), 3, Cadence.monthly(), date(2024, 1, 31))

        assert [e.due_date for e in schedule] == [
            date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)
        ]
        assert [e.amount for e in schedule] == [
            Decimal('333.33'), Decimal('333.33'), Decimal('333.34')
        ]

    def test_custom_ten_days(self):
        schedule = generate(Decimal('400.00'), 4, Cadence.custom(10), date(2024, 3, 1))

        assert [e.due_date for e in schedule] == [
            date(2024, 3, 1), date(2024, 3, 11), date(2024, 3, 21), date(2024, 3, 31)
        ]

    def test_biweekly_is_fifteen_days(self):
        schedule = generate(Decimal('300.00'), 3, Cadence.biweekly(), date(2024, 2, 1))
        assert [e.due_date for e in schedule] == [
            date(2024, 2, 1), date(2024, 2, 16), date(2024, 3, 2)
        ]

    def test_lump_sum_ignores_cadence(self):
        schedule = generate(Decimal('600.00'), 1, None, date(2024, 1, 1))

        assert len(schedule) == 1
        assert schedule[0].number == 1
        assert schedule[0].due_date == date(2024, 1, 1)
        assert schedule[0].amount == Decimal('600.00')

    def test_amount_is_normalized_to_cents(self):
        schedule = generate('250', 2, Cadence.weekly(), date(2024, 1, 1))
        assert [e.amount for e in schedule] == [Decimal('125.00'), Decimal('125.00')]


class TestScheduleValidation:
    """Отказ до создания записей."""

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_count(self, count):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), count, Cadence.monthly(), date(2024, 1, 1))

    @pytest.mark.parametrize("total", [Decimal('0'), Decimal('-10.00')])
    def test_non_positive_total(self, total):
        with pytest.raises(InvalidScheduleError):
            generate(total, 2, Cadence.monthly(), date(2024, 1, 1))

    def test_non_positive_custom_step(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 2, Cadence.custom(0), date(2024, 1, 1))

    def test_missing_cadence_for_installments(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 2, None, date(2024, 1, 1))

    def test_total_below_one_cent_per_installment(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('0.02'), 3, Cadence.weekly(), date(2024, 1, 1))

    def test_invalid_custom_step_with_single_installment(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 1, Cadence.custom(0), date(2024, 1, 1))

    def test_custom_step_beyond_calendar(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 3, Cadence.custom(10 ** 7), date(2024, 1, 1))

    def test_monthly_past_year_9999(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 3, Cadence.monthly(), date(9999, 11, 1))

    def test_weekly_past_year_9999(self):
        with pytest.raises(InvalidScheduleError):
            generate(Decimal('100.00'), 3, Cadence.weekly(), date(9999, 12, 25))
