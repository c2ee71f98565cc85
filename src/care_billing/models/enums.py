"""
Модуль перечислений (enums) для Care Billing.

Значения статусов совпадают с теми, что хранятся в базе дашборда
(португальские коды: pendente, pago, quitado, parcial).
"""

from enum import Enum


class PaymentArrangement(str, Enum):
    """
    Схема оплаты договора.

    Attributes:
        LUMP_SUM: Единовременная оплата (ровно один взнос)
        INSTALLMENTS: Оплата в рассрочку (N взносов)
    """
    LUMP_SUM = "lump_sum"
    INSTALLMENTS = "installments"


class CadenceKind(str, Enum):
    """
    Периодичность взносов.

    Attributes:
        WEEKLY: Каждые 7 дней
        BIWEEKLY: Каждые 15 дней (quinzenal)
        MONTHLY: Каждый календарный месяц
        CUSTOM: Каждые N дней
    """
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class InstallmentStatus(str, Enum):
    """
    Статус взноса (бинарный).

    Attributes:
        PENDENTE: Не оплачен полностью
        PAGO: Оплачен полностью
    """
    PENDENTE = "pendente"
    PAGO = "pago"


class ContractStatus(str, Enum):
    """
    Статус договора по полученным суммам.

    Attributes:
        QUITADO: Остаток к получению равен нулю
        PARCIAL: Получена часть суммы
        PENDENTE: Ничего не получено
    """
    QUITADO = "quitado"
    PARCIAL = "parcial"
    PENDENTE = "pendente"


class PaymentMethod(str, Enum):
    """
    Способ оплаты, указанный при заключении договора.
    """
    PIX = "pix"
    CARTAO = "cartao"
    DINHEIRO = "dinheiro"
    TRANSFERENCIA = "transferencia"
    BOLETO = "boleto"
