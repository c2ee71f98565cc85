"""Утилиты приложения."""

from care_billing.utils.logger import setup_logging
from care_billing.utils.money import CENT, ZERO, to_money, split_evenly
from care_billing.utils.exceptions import (
    CareBillingError,
    ValidationError,
    InvalidScheduleError,
    BusinessLogicError,
    OverpaymentError,
    ScheduleIntegrityError,
    DatabaseError,
    ContractNotFoundError,
    InstallmentNotFoundError,
    DestructiveRegenerationWarning,
)

__all__ = [
    "setup_logging",
    "CENT",
    "ZERO",
    "to_money",
    "split_evenly",
    "CareBillingError",
    "ValidationError",
    "InvalidScheduleError",
    "BusinessLogicError",
    "OverpaymentError",
    "ScheduleIntegrityError",
    "DatabaseError",
    "ContractNotFoundError",
    "InstallmentNotFoundError",
    "DestructiveRegenerationWarning",
]
