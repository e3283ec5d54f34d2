from typing import List, Optional, Sequence

from rapidfuzz.distance import LCSseq

from models import (
    AlreadyPaid,
    Contact,
    Invoice,
    MatchResult,
    NoMatch,
    ShiftEvent,
    UnpaidMultiple,
    UnpaidSingle,
)
from money import amounts_equal


# Payout descriptions are usually abbreviated contact names ("ACME" for
# "Acme Supplies Ltd"), so the name filter is loose and the amount filter does
# the real work.
SIMILARITY_THRESHOLD = 0.2


def contact_similarity(description: str, name: str) -> float:
    """Normalized LCS similarity in [0.0, 1.0]. Case-sensitive.

    Computed as lcs / max(len) rather than 1 - normalized_distance so that a
    score landing exactly on the threshold compares equal to it.
    """
    longest = max(len(description), len(name))
    if longest == 0:
        return 1.0
    return LCSseq.similarity(description, name) / longest


def fuzzy_matches_contact(
    description: Optional[str], contact: Contact, threshold: float = SIMILARITY_THRESHOLD
) -> bool:
    if description is None:
        return False
    return contact_similarity(description, contact.name) >= threshold


def _matches_amount(event_amount, invoice: Invoice) -> bool:
    return (
        amounts_equal(invoice.amount_due, event_amount)
        or amounts_equal(invoice.amount_paid, event_amount)
    )


def find_match(
    event: ShiftEvent, invoices: Sequence[Invoice], threshold: float = SIMILARITY_THRESHOLD
) -> MatchResult:
    """Classify a payout event against the invoice list.

    Candidates are payable invoices whose contact plausibly matches the event
    description and whose amount due or amount paid equals the event amount.
    If any candidate already carries a payment the event is ``AlreadyPaid``,
    even when unpaid candidates exist too. Otherwise one unpaid candidate is
    ``UnpaidSingle`` and several are ``UnpaidMultiple`` in input order.

    Raises:
        InvalidAmount: the event amount cannot be normalised.
    """
    event_amount = event.money.as_decimal()

    if event.description is None:
        return NoMatch()

    candidates: List[Invoice] = [
        inv
        for inv in invoices
        if inv.is_payable
        and fuzzy_matches_contact(event.description, inv.contact, threshold)
        and _matches_amount(event_amount, inv)
    ]
    if not candidates:
        return NoMatch()

    paid = [inv for inv in candidates if inv.has_payments]
    unpaid = [inv for inv in candidates if not inv.has_payments]

    # Settled candidates win: the payout was most likely recorded already
    if paid:
        return AlreadyPaid()

    if len(unpaid) == 1:
        return UnpaidSingle(unpaid[0])
    return UnpaidMultiple(tuple(unpaid))
