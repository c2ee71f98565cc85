__all__ = [
    "validate_cadence",
    "add_calendar_months",
    "offset_days",
    "due_date_for",
    "generate",
    "classify",
    "build_installments",
    "verify_schedule_integrity",
    "verify_total_matches",
    "reconcile",
    "replace_schedule",
    "create_contract",
    "change_installment_count",
    "record_manual_payment",
    "record_installment_payment",
    "get_contract_status",
    "get_overdue_installments",
    "get_next_due_installment",
    "get_contract_summary",
    "get_portfolio_totals",
    "get_contract_schedule",
    "list_contracts",
    "save_contract_schedule",
    "create_contract_record",
    "change_installment_count_by_id",
    "record_payment_by_id",
    "record_installment_payment_by_id",
    "get_overdue_installment_rows",
]

from care_billing.services.cadence_service import (
    validate_cadence,
    add_calendar_months,
    offset_days,
    due_date_for
)

from care_billing.services.schedule_service import generate

from care_billing.services.settlement_service import (
    classify,
    build_installments
)

from care_billing.services.reconciliation_service import (
    verify_schedule_integrity,
    verify_total_matches,
    reconcile,
    replace_schedule
)

from care_billing.services.billing_service import (
    create_contract,
    change_installment_count,
    record_manual_payment,
    record_installment_payment
)

from care_billing.services.statistics_service import (
    get_contract_status,
    get_overdue_installments,
    get_next_due_installment,
    get_contract_summary,
    get_portfolio_totals
)

from care_billing.services.contract_repository import (
    get_contract_schedule,
    list_contracts,
    save_contract_schedule,
    create_contract_record,
    change_installment_count_by_id,
    record_payment_by_id,
    record_installment_payment_by_id,
    get_overdue_installment_rows
)
