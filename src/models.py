from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from money import from_minor_units, to_canonical


DEFAULT_PAYMENT_REFERENCE = "Auto-reconciled using cashtx tool"


class ShiftState(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    ENDED = "ENDED"


class ShiftEventType(Enum):
    NO_SALE = "NO_SALE"
    CASH_TENDER_PAYMENT = "CASH_TENDER_PAYMENT"
    OTHER_TENDER_PAYMENT = "OTHER_TENDER_PAYMENT"
    CASH_TENDER_CANCELLED_PAYMENT = "CASH_TENDER_CANCELLED_PAYMENT"
    OTHER_TENDER_CANCELLED_PAYMENT = "OTHER_TENDER_CANCELLED_PAYMENT"
    CASH_TENDER_REFUND = "CASH_TENDER_REFUND"
    OTHER_TENDER_REFUND = "OTHER_TENDER_REFUND"
    PAID_IN = "PAID_IN"
    PAID_OUT = "PAID_OUT"


class InvoiceType(Enum):
    ACCPAY = "ACCPAY"  # payable
    ACCREC = "ACCREC"  # receivable


class InvoiceStatus(Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    AUTHORISED = "AUTHORISED"
    PAID = "PAID"
    DELETED = "DELETED"
    VOIDED = "VOIDED"


def _parse_timestamp(value: str) -> datetime:
    # Square: 2025-01-31T09:00:00.123Z / Xero: 2025-01-31T00:00:00
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class Shift:
    shift_id: str
    state: ShiftState
    created_at: datetime

    @classmethod
    def from_api(cls, data: Dict) -> "Shift":
        return cls(
            shift_id=data["id"],
            state=ShiftState(data["state"]),
            created_at=_parse_timestamp(data["created_at"]),
        )

    @property
    def business_date(self) -> date:
        return self.created_at.date()


@dataclass(frozen=True)
class Money:
    amount: Union[int, float, Decimal]  # minor units
    currency: str

    def as_decimal(self) -> Decimal:
        return from_minor_units(self.amount)


@dataclass(frozen=True)
class ShiftEvent:
    event_type: ShiftEventType
    money: Money
    description: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict) -> "ShiftEvent":
        money = data["event_money"]
        return cls(
            event_type=ShiftEventType(data["event_type"]),
            money=Money(amount=money["amount"], currency=money["currency"]),
            description=data.get("description"),
        )

    @property
    def display_description(self) -> str:
        if self.description is None:
            return "(no description)"
        return self.description.strip()


@dataclass(frozen=True)
class Contact:
    contact_id: str
    name: str


@dataclass(frozen=True)
class Invoice:
    invoice_id: str
    invoice_number: str
    invoice_type: InvoiceType
    amount_due: Decimal
    amount_paid: Decimal
    contact: Contact
    date: datetime
    due_date: datetime
    status: InvoiceStatus

    @classmethod
    def from_api(cls, data: Dict) -> "Invoice":
        contact = data["Contact"]
        return cls(
            invoice_id=data["InvoiceID"],
            invoice_number=data.get("InvoiceNumber", ""),
            invoice_type=InvoiceType(data["Type"]),
            amount_due=to_canonical(data["AmountDue"]),
            amount_paid=to_canonical(data["AmountPaid"]),
            contact=Contact(contact_id=contact["ContactID"], name=contact["Name"]),
            date=_parse_timestamp(data["DateString"]),
            due_date=_parse_timestamp(data["DueDateString"]),
            status=InvoiceStatus(data["Status"]),
        )

    @property
    def is_payable(self) -> bool:
        return self.invoice_type == InvoiceType.ACCPAY

    @property
    def has_payments(self) -> bool:
        # Any amount paid counts as settled for matching, whatever the status says
        return self.amount_paid > 0


# Match results: exactly one of these per event


@dataclass(frozen=True)
class NoMatch:
    pass


@dataclass(frozen=True)
class AlreadyPaid:
    pass


@dataclass(frozen=True)
class UnpaidSingle:
    invoice: Invoice


@dataclass(frozen=True)
class UnpaidMultiple:
    invoices: Tuple[Invoice, ...]


MatchResult = Union[NoMatch, AlreadyPaid, UnpaidSingle, UnpaidMultiple]


@dataclass(frozen=True)
class PaymentInstruction:
    invoice_id: str
    account_code: str
    date: date
    amount: Decimal
    reference: str = DEFAULT_PAYMENT_REFERENCE

    def to_payload(self) -> Dict:
        """Xero Payments API object"""
        return {
            "Invoice": {"InvoiceID": self.invoice_id},
            "Account": {"Code": self.account_code},
            "Date": self.date.isoformat(),
            "Amount": float(self.amount),
            "Reference": self.reference,
        }


@dataclass(frozen=True)
class MatchedEvent:
    shift: Shift
    event: ShiftEvent
    invoice: Invoice


@dataclass(frozen=True)
class UnmatchedEvent:
    shift: Shift
    event: ShiftEvent
    reason: str  # no_match | deferred | selection_error


@dataclass(frozen=True)
class Anomaly:
    shift: Shift
    event: ShiftEvent
    error: str


@dataclass
class ReconciliationResult:
    matched: List[MatchedEvent] = field(default_factory=list)
    already_paid: List[ShiftEvent] = field(default_factory=list)
    unmatched: List[UnmatchedEvent] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
