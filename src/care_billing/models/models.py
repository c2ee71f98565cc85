"""
Модуль моделей данных для Care Billing.

Содержит:
- ContractDB / InstallmentDB: SQLAlchemy модели для хранения договоров и взносов
- Cadence: периодичность взносов
- ScheduleEntry / Settlement: промежуточные значения расчёта графика
- Contract / Installment: неизменяемые Pydantic объекты, с которыми работает ядро
- ContractSchedule: договор вместе с полным набором взносов
- ContractCreate: входные данные для создания договора
- ContractSummary: сводка по договору для панели дашборда
"""

from datetime import datetime
from datetime import date as date_type
from typing import List, Optional
from decimal import Decimal
import uuid

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship, DeclarativeBase
from pydantic import BaseModel, field_validator, Field, ConfigDict, computed_field

from .enums import (
    PaymentArrangement, CadenceKind, InstallmentStatus, ContractStatus, PaymentMethod
)


# Декларативная база для SQLAlchemy моделей
class Base(DeclarativeBase):
    """Базовый класс для всех SQLAlchemy моделей."""
    pass


class ContractDB(Base):
    """
    Договор клиента (в схеме дашборда это финансовая транзакция типа receita).

    Attributes:
        id: Уникальный идентификатор (UUID)
        client_id: ID клиента-владельца (UUID, опционально)
        description: Описание договора
        notes: Примечания
        payment_method: Способ оплаты
        total_amount: Сумма договора
        payment_arrangement: Схема оплаты (единовременно / рассрочка)
        installment_count: Количество взносов
        cadence_kind: Периодичность взносов
        cadence_days: Шаг в днях для кастомной периодичности
        first_due_date: Дата первого взноса
        created_on: Дата заключения договора
        amount_received: Получено (сумма amount_paid по взносам)
        amount_pending: Остаток к получению
        created_at: Дата создания записи
        updated_at: Дата последнего обновления
        installments: Взносы договора
    """
    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    client_id = Column(String(36), nullable=True)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    payment_method = Column(SQLEnum(PaymentMethod), default=PaymentMethod.PIX)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_arrangement = Column(SQLEnum(PaymentArrangement), nullable=False)
    installment_count = Column(Integer, nullable=False, default=1)
    cadence_kind = Column(SQLEnum(CadenceKind), nullable=True)
    cadence_days = Column(Integer, nullable=True)
    first_due_date = Column(Date, nullable=False)
    created_on = Column(Date, nullable=False)
    amount_received = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    amount_pending = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Связи
    installments = relationship(
        "InstallmentDB",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="InstallmentDB.installment_number",
    )

    __table_args__ = (
        Index('ix_contracts_client_id', 'client_id'),
    )


class InstallmentDB(Base):
    """
    Взнос по договору.

    Attributes:
        id: Уникальный идентификатор (UUID)
        contract_id: ID договора-владельца (UUID)
        installment_number: Номер взноса (с 1)
        total_installments: Количество взносов на момент генерации (для отображения)
        amount: Сумма взноса
        amount_paid: Оплаченная часть
        due_date: Срок оплаты
        status: Статус (pendente / pago)
        paid_at: Момент полной оплаты
        created_at: Дата создания записи
        updated_at: Дата последнего обновления
    """
    __tablename__ = "installments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    contract_id = Column(String(36), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False)
    installment_number = Column(Integer, nullable=False)
    total_installments = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))
    due_date = Column(Date, nullable=False)
    status = Column(SQLEnum(InstallmentStatus), nullable=False, default=InstallmentStatus.PENDENTE)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Связи
    contract = relationship("ContractDB", back_populates="installments")

    # Индексы для производительности
    __table_args__ = (
        UniqueConstraint('contract_id', 'installment_number', name='uq_installments_contract_number'),
        Index('ix_installments_due_date', 'due_date'),
        Index('ix_installments_status_due_date', 'status', 'due_date'),
    )


# =============================================================================
# Pydantic модели ядра биллинга
# =============================================================================

class Cadence(BaseModel):
    """
    Периодичность взносов.

    Для CUSTOM поле days задаёт шаг в днях. Корректность шага проверяется
    при построении графика (cadence_service.validate_cadence).

    Example:
        >>> Cadence.monthly()
        Cadence(kind=<CadenceKind.MONTHLY: 'monthly'>, days=None)
        >>> Cadence.custom(10).days
        10
    """
    kind: CadenceKind
    days: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def weekly(cls) -> "Cadence":
        return cls(kind=CadenceKind.WEEKLY)

    @classmethod
    def biweekly(cls) -> "Cadence":
        return cls(kind=CadenceKind.BIWEEKLY)

    @classmethod
    def monthly(cls) -> "Cadence":
        return cls(kind=CadenceKind.MONTHLY)

    @classmethod
    def custom(cls, days: int) -> "Cadence":
        return cls(kind=CadenceKind.CUSTOM, days=days)


class ScheduleEntry(BaseModel):
    """Строка графика: номер, срок и сумма взноса."""
    number: int
    due_date: date_type
    amount: Decimal

    model_config = ConfigDict(frozen=True)


class Settlement(BaseModel):
    """Результат классификации взноса на момент создания графика."""
    number: int
    paid_amount: Decimal
    status: InstallmentStatus
    paid_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class Installment(BaseModel):
    """
    Взнос по договору (неизменяемое значение).

    Изменения выполняются через model_copy(update=...) в сервисах.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    contract_id: str
    installment_number: int
    total_installments: int
    amount: Decimal
    amount_paid: Decimal = Decimal('0.00')
    due_date: date_type
    status: InstallmentStatus = InstallmentStatus.PENDENTE
    paid_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def remaining(self) -> Decimal:
        """Неоплаченная часть взноса."""
        return self.amount - self.amount_paid

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAGO


class Contract(BaseModel):
    """
    Договор (неизменяемое значение).

    amount_received и amount_pending записывает только
    reconciliation_service.reconcile.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    client_id: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.PIX
    total_amount: Decimal
    payment_arrangement: PaymentArrangement
    installment_count: int
    cadence: Optional[Cadence] = None
    first_due_date: date_type
    created_on: date_type
    amount_received: Decimal = Decimal('0.00')
    amount_pending: Decimal = Decimal('0.00')

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def excess_received(self) -> Decimal:
        """
        Получено сверх суммы договора.

        Остаток к получению не бывает отрицательным, поэтому переплата
        отражается здесь.
        """
        excess = self.amount_received - self.total_amount
        return excess if excess > 0 else Decimal('0.00')


class ContractSchedule(BaseModel):
    """Договор вместе с полным набором взносов, отсортированным по номеру."""
    contract: Contract
    installments: List[Installment]

    model_config = ConfigDict(frozen=True)


class ContractCreate(BaseModel):
    """
    Входные данные для создания договора из форм дашборда.

    Проверки графика (сумма, количество, периодичность) выполняет
    schedule_service, здесь только форма данных.
    """
    total_amount: Decimal
    payment_arrangement: PaymentArrangement
    installment_count: Optional[int] = None
    cadence: Optional[Cadence] = None
    first_due_date: Optional[date_type] = None
    manual_first_paid: bool = False
    client_id: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.PIX

    @field_validator('client_id')
    @classmethod
    def validate_uuid(cls, v: Optional[str]) -> Optional[str]:
        """Валидация формата UUID."""
        if v is not None:
            try:
                uuid.UUID(v)
            except ValueError:
                raise ValueError(f'Невалидный UUID: {v}')
        return v

    @field_validator('description', 'notes')
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        """Пустые строки сохраняются как None."""
        if v is None:
            return None
        v = v.strip()
        return v or None


class ContractSummary(BaseModel):
    """
    Сводка по договору для панели «Detalhes da Receita».

    Attributes:
        contract_id: ID договора
        status: quitado / parcial / pendente
        total_amount: Сумма договора
        amount_received: Получено
        amount_pending: Остаток
        excess_received: Переплата
        progress_percent: Доля полученного, 0..100
        installment_count: Количество взносов
        installment_value: Базовая сумма взноса (первого)
        paid_installments: Количество оплаченных взносов
        overdue_count: Количество просроченных взносов
        overdue_amount: Неоплаченная сумма просроченных взносов
        next_due_date: Срок ближайшего неоплаченного взноса
    """
    contract_id: str
    status: ContractStatus
    total_amount: Decimal
    amount_received: Decimal
    amount_pending: Decimal
    excess_received: Decimal
    progress_percent: Decimal
    installment_count: int
    installment_value: Decimal
    paid_installments: int
    overdue_count: int
    overdue_amount: Decimal
    next_due_date: Optional[date_type] = None
