import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from disambiguation import SelectionError
from matcher import SIMILARITY_THRESHOLD, find_match
from models import (
    AlreadyPaid,
    Anomaly,
    DEFAULT_PAYMENT_REFERENCE,
    Invoice,
    MatchedEvent,
    NoMatch,
    PaymentInstruction,
    ReconciliationResult,
    Shift,
    ShiftEvent,
    ShiftEventType,
    ShiftState,
    UnmatchedEvent,
    UnpaidMultiple,
    UnpaidSingle,
)
from money import InvalidAmount


# (shift, event, candidates) -> chosen invoice or None to defer
Resolver = Callable[[Shift, ShiftEvent, Sequence[Invoice]], Optional[Invoice]]
ExclusionPredicate = Callable[[ShiftEvent], bool]


def make_exclusion_predicate(pattern: Optional[str]) -> Optional[ExclusionPredicate]:
    """Build a predicate that excludes events whose description matches ``pattern``.

    The pattern is searched in the trimmed, lower-cased description. A missing
    description is treated as empty. Returns None for an empty pattern.
    """
    if not pattern:
        return None
    compiled = re.compile(pattern)

    def is_excluded(event: ShiftEvent) -> bool:
        return compiled.search((event.description or "").lower().strip()) is not None

    return is_excluded


def reconcile(
    shift_events: Iterable[Tuple[Shift, Sequence[ShiftEvent]]],
    invoices: Sequence[Invoice],
    resolver: Resolver,
    is_excluded: Optional[ExclusionPredicate] = None,
    threshold: float = SIMILARITY_THRESHOLD,
) -> ReconciliationResult:
    """Match every paid-out event of every closed shift against ``invoices``.

    Events are processed one at a time in input order. A failure on one event
    (bad amount, bad operator selection) is recorded and the run carries on.
    """
    result = ReconciliationResult()

    for shift, events in shift_events:
        if shift.state != ShiftState.CLOSED:
            continue

        for event in events:
            if event.event_type != ShiftEventType.PAID_OUT:
                continue
            if is_excluded is not None and is_excluded(event):
                continue

            try:
                match = find_match(event, invoices, threshold)
            except InvalidAmount as e:
                print(f"  ⚠️ Skipping event with invalid amount: {event.display_description} ({e})")
                result.anomalies.append(Anomaly(shift, event, str(e)))
                continue

            _classify(result, shift, event, match, resolver)

    return result


def _classify(result: ReconciliationResult, shift: Shift, event: ShiftEvent, match, resolver: Resolver):
    if isinstance(match, NoMatch):
        result.unmatched.append(UnmatchedEvent(shift, event, "no_match"))
    elif isinstance(match, AlreadyPaid):
        result.already_paid.append(event)
    elif isinstance(match, UnpaidSingle):
        result.matched.append(MatchedEvent(shift, event, match.invoice))
    elif isinstance(match, UnpaidMultiple):
        try:
            chosen = resolver(shift, event, match.invoices)
        except SelectionError as e:
            print(f"  ⚠️ Invalid selection, leaving event undecided: {e}")
            result.unmatched.append(UnmatchedEvent(shift, event, "selection_error"))
            return
        if chosen is None:
            result.unmatched.append(UnmatchedEvent(shift, event, "deferred"))
        else:
            result.matched.append(MatchedEvent(shift, event, chosen))
    else:
        raise TypeError(f"unhandled match result: {match!r}")


def build_payment_instructions(
    matched: Iterable[MatchedEvent],
    account_code: str,
    reference: str = DEFAULT_PAYMENT_REFERENCE,
) -> List[PaymentInstruction]:
    """One payment per matched event, dated on the shift's business date."""
    return [
        PaymentInstruction(
            invoice_id=m.invoice.invoice_id,
            account_code=account_code,
            date=m.shift.business_date,
            amount=m.event.money.as_decimal(),
            reference=reference,
        )
        for m in matched
    ]
