"""SQLAlchemy ORM models for users, projects and billing."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin, utcnow


# Роли пользователей
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_SUPERVISOR = "supervisor"
ROLE_CLIENT = "client"
ROLE_DESIGNER = "designer"
ROLE_EDITOR = "editor"
ROLE_REVIEWER = "reviewer"

ADMIN_ROLES = (ROLE_OWNER, ROLE_ADMIN)
TEAM_ROLES = (ROLE_EDITOR, ROLE_DESIGNER, ROLE_REVIEWER)

ROLE_NAMES_AR = {
    ROLE_CLIENT: "عميل",
    ROLE_EDITOR: "محرر",
    ROLE_DESIGNER: "مصمم",
    ROLE_REVIEWER: "مُراجع",
    ROLE_ADMIN: "مدير",
}

# Значения статусов проекта (хранятся как есть)
FILMING_DONE = "تم الانتـــهاء مــنه"
FILMING_NOT_DONE = "لم يتم الانتهاء منه"
MODE_NOT_STARTED = "لم يبدأ"
MODE_WAITING = "في الانتظار"
MODE_IN_PROGRESS = "قيد التنفيذ"
MODE_DONE = "تم الانتهاء منه"
REVIEW_DONE = "تمت المراجعة"
VERIFICATION_NONE = "لا شيء"

CREDENTIAL_PROVIDER = "credential"

_JSON = JSON().with_variant(JSONB, "postgresql")


def role_in_arabic(role: Optional[str]) -> str:
    return ROLE_NAMES_AR.get(role or "", role or "")


class InvoiceStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, enum.Enum):
    PAYPAL = "PAYPAL"
    CRYPTO_BITCOIN = "CRYPTO_BITCOIN"
    CRYPTO_ETHEREUM = "CRYPTO_ETHEREUM"
    CRYPTO_USDT = "CRYPTO_USDT"
    BANK_TRANSFER = "BANK_TRANSFER"
    OTHER = "OTHER"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class Group(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    telegram_chat_id: Mapped[Optional[str]] = mapped_column(String(64))
    telegram_invite_link: Mapped[Optional[str]] = mapped_column(String(512))
    telegram_group_name: Mapped[Optional[str]] = mapped_column(String(255))

    users: Mapped[list["User"]] = relationship(
        "User",
        back_populates="group",
        lazy="selectin",
    )


class User(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    role: Mapped[Optional[str]] = mapped_column(String(32))
    phone: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    group_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("groups.id", ondelete="SET NULL")
    )
    suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    suspended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    suspension_reason: Mapped[Optional[str]] = mapped_column(Text)

    group: Mapped[Optional["Group"]] = relationship(
        "Group",
        back_populates="users",
        lazy="selectin",
    )
    accounts: Mapped[list["Account"]] = relationship(
        "Account",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["Session"]] = relationship(
        "Session",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class Account(UUIDMixin, TimestampMixin, Base):
    """Способ входа пользователя; для входа по паролю provider_id = credential."""

    __tablename__ = "accounts"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False, default=CREDENTIAL_PROVIDER)
    password: Mapped[Optional[str]] = mapped_column(String(255))

    user: Mapped["User"] = relationship("User", back_populates="accounts")


class Session(UUIDMixin, Base):
    __tablename__ = "sessions"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    user_agent: Mapped[Optional[str]] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="sessions")


class Project(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(128), nullable=False)
    filming_status: Mapped[str] = mapped_column(String(64), nullable=False)
    file_links: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    date: Mapped[Optional[str]] = mapped_column(String(64))
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    edit_mode: Mapped[str] = mapped_column(String(64), default=MODE_NOT_STARTED, nullable=False)
    review_mode: Mapped[str] = mapped_column(String(64), default=MODE_WAITING, nullable=False)
    design_mode: Mapped[str] = mapped_column(String(64), default=MODE_WAITING, nullable=False)
    verification_mode: Mapped[str] = mapped_column(String(64), default=VERIFICATION_NONE, nullable=False)
    review_links: Mapped[Optional[str]] = mapped_column(Text)
    design_links: Mapped[Optional[str]] = mapped_column(Text)
    documentation: Mapped[Optional[str]] = mapped_column(Text)
    video_duration: Mapped[Optional[str]] = mapped_column(String(32))
    voice_note_url: Mapped[Optional[str]] = mapped_column(String(512))

    client_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    group_id: Mapped[Optional[str]] = mapped_column(ForeignKey("groups.id", ondelete="SET NULL"))
    editor_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    designer_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    reviewer_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    client: Mapped["User"] = relationship("User", foreign_keys=[client_id], lazy="selectin")
    editor: Mapped[Optional["User"]] = relationship("User", foreign_keys=[editor_id], lazy="selectin")
    designer: Mapped[Optional["User"]] = relationship("User", foreign_keys=[designer_id], lazy="selectin")
    reviewer: Mapped[Optional["User"]] = relationship("User", foreign_keys=[reviewer_id], lazy="selectin")
    group: Mapped[Optional["Group"]] = relationship("Group", lazy="selectin")

    @property
    def is_completed(self) -> bool:
        """Все этапы проекта завершены (за проект выставляется счёт)."""
        return (
            self.filming_status == FILMING_DONE
            and self.edit_mode == MODE_DONE
            and self.design_mode == MODE_DONE
            and self.review_mode == REVIEW_DONE
        )


class Invoice(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    client_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    billing_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    billing_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, name="invoice_status"),
        default=InvoiceStatus.PENDING,
        nullable=False,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    items: Mapped[list["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class InvoiceItem(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "invoice_items"

    invoice_id: Mapped[str] = mapped_column(ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    project_id: Mapped[Optional[str]] = mapped_column(ForeignKey("projects.id", ondelete="SET NULL"))
    description: Mapped[str] = mapped_column(Text, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    work_type: Mapped[Optional[str]] = mapped_column(String(64))
    work_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    work_description: Mapped[Optional[str]] = mapped_column(Text)

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="items")


class Payment(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "payments"

    invoice_id: Mapped[str] = mapped_column(ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method"),
        nullable=False,
    )
    payment_provider: Mapped[Optional[str]] = mapped_column(String(64))
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255))
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), default="USD", nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    paypal_order_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    paypal_payer_id: Mapped[Optional[str]] = mapped_column(String(64))
    crypto_address: Mapped[Optional[str]] = mapped_column(String(255))
    crypto_network: Mapped[Optional[str]] = mapped_column(String(64))
    payment_metadata: Mapped[Optional[dict]] = mapped_column("metadata", _JSON)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="payments")
