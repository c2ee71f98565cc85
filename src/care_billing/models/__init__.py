from care_billing.models.enums import (
    PaymentArrangement,
    CadenceKind,
    InstallmentStatus,
    ContractStatus,
    PaymentMethod,
)
from care_billing.models.models import (
    Base,
    ContractDB,
    InstallmentDB,
    Cadence,
    ScheduleEntry,
    Settlement,
    Installment,
    Contract,
    ContractSchedule,
    ContractCreate,
    ContractSummary,
)

__all__ = [
    "PaymentArrangement",
    "CadenceKind",
    "InstallmentStatus",
    "ContractStatus",
    "PaymentMethod",
    "Base",
    "ContractDB",
    "InstallmentDB",
    "Cadence",
    "ScheduleEntry",
    "Settlement",
    "Installment",
    "Contract",
    "ContractSchedule",
    "ContractCreate",
    "ContractSummary",
]
