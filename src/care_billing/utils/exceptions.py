"""
Модуль пользовательских исключений Care Billing.
"""

from decimal import Decimal


class CareBillingError(Exception):
    """Базовый класс для всех исключений приложения."""
    pass


class ValidationError(CareBillingError):
    """Исключение при ошибке валидации данных (пользовательский ввод)."""
    pass


class InvalidScheduleError(ValidationError):
    """
    Невозможно построить график платежей.

    Неположительная сумма, неположительное количество взносов,
    неположительный шаг кастомной периодичности и т.п.
    """
    pass


class BusinessLogicError(CareBillingError):
    """Исключение при нарушении бизнес-правил."""
    pass


class OverpaymentError(BusinessLogicError):
    """
    Платёж превышает оставшийся к получению остаток.

    Attributes:
        excess: Сумма, которую некуда распределить
    """

    def __init__(self, message: str, excess: Decimal):
        super().__init__(message)
        self.excess = excess


class ScheduleIntegrityError(BusinessLogicError):
    """Набор взносов нарушает инварианты договора."""
    pass


class DatabaseError(CareBillingError):
    """Исключение при ошибках работы с базой данных."""
    pass


class ContractNotFoundError(CareBillingError):
    """Исключение когда договор не найден."""
    pass


class InstallmentNotFoundError(CareBillingError):
    """Исключение когда взнос не найден."""
    pass


class DestructiveRegenerationWarning(CareBillingError, UserWarning):
    """
    Пересоздание графика уничтожит историю оплаченных взносов.

    Без подтверждения выбрасывается как исключение, с подтверждением
    выдаётся через warnings.warn.

    Attributes:
        contract_id: ID договора
        paid_installments: Количество взносов с amount_paid > 0
        discarded_amount: Сумма оплат в удаляемых записях
    """

    def __init__(self, contract_id: str, paid_installments: int, discarded_amount: Decimal):
        super().__init__(
            f"Пересоздание графика договора {contract_id} удалит историю "
            f"{paid_installments} оплаченных взносов на сумму {discarded_amount}"
        )
        self.contract_id = contract_id
        self.paid_installments = paid_installments
        self.discarded_amount = discarded_amount
