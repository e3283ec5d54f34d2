from typing import Callable, List, Optional, Sequence

from models import Invoice, Shift, ShiftEvent
from money import format_amount


Prompt = Callable[[str], str]


class SelectionError(ValueError):
    """Operator input did not name one of the listed candidates."""

    def __init__(self, raw: str, candidate_count: int):
        super().__init__(
            f"invalid selection {raw!r}: expected a number from 0 to {candidate_count - 1} or empty input"
        )
        self.raw = raw
        self.candidate_count = candidate_count


def render_candidates(shift: Shift, event: ShiftEvent, candidates: Sequence[Invoice]) -> str:
    lines: List[str] = [
        "",
        f"   Pick invoice for cash event: {shift.business_date:%Y-%m-%d} "
        f"{event.display_description} £{format_amount(event.money.as_decimal())}",
        "",
    ]
    for index, inv in enumerate(candidates):
        lines.append(
            f"     #{index} | {inv.contact.name} | {inv.due_date:%Y-%m-%d} | £{format_amount(inv.amount_due)}"
        )
    lines.append("     (empty input to leave undecided)")
    lines.append("")
    return "\n".join(lines)


def parse_selection(raw: str, candidates: Sequence[Invoice]) -> Optional[Invoice]:
    """Empty input defers (None); otherwise the input must be an index into ``candidates``."""
    chosen = (raw or "").strip()
    if not chosen:
        return None
    try:
        index = int(chosen)
    except ValueError:
        raise SelectionError(raw, len(candidates))
    if index < 0 or index >= len(candidates):
        raise SelectionError(raw, len(candidates))
    return candidates[index]


def resolve_ambiguous_match(
    shift: Shift, event: ShiftEvent, candidates: Sequence[Invoice], prompt: Prompt
) -> Optional[Invoice]:
    """Ask the operator which of several unpaid invoices a payout belongs to.

    Blocks on ``prompt`` until it returns. Returns the chosen invoice, or None
    when the operator leaves the event undecided.

    Raises:
        SelectionError: the answer is not empty and not a listed index.
    """
    if len(candidates) < 2:
        raise ValueError("disambiguation needs at least two candidates")
    answer = prompt(render_candidates(shift, event, candidates))
    return parse_selection(answer, candidates)


def console_prompt(text: str) -> str:
    print(text)
    try:
        return input("   > ")
    except EOFError:
        return ""
