from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from disambiguation import (
    SelectionError,
    console_prompt,
    parse_selection,
    render_candidates,
    resolve_ambiguous_match,
)
from models import (
    Contact,
    Invoice,
    InvoiceStatus,
    InvoiceType,
    Money,
    Shift,
    ShiftEvent,
    ShiftEventType,
    ShiftState,
)


SHIFT = Shift("shift-1", ShiftState.CLOSED, datetime(2025, 3, 14, 17, 30, tzinfo=timezone.utc))
EVENT = ShiftEvent(ShiftEventType.PAID_OUT, Money(2500, "GBP"), "Bobs Bakery ")


def _invoice(inv_id, name):
    return Invoice(
        invoice_id=inv_id,
        invoice_number=f"INV-{inv_id}",
        invoice_type=InvoiceType.ACCPAY,
        amount_due=Decimal("25.00"),
        amount_paid=Decimal("0.00"),
        contact=Contact(f"c-{inv_id}", name),
        date=datetime(2025, 3, 1),
        due_date=datetime(2025, 3, 31),
        status=InvoiceStatus.AUTHORISED,
    )


CANDIDATES = (_invoice("1", "Bob's Bakery"), _invoice("2", "Bobs Bakery Ltd"))


def test_render_lists_candidates_in_order():
    text = render_candidates(SHIFT, EVENT, CANDIDATES)
    assert "Pick invoice for cash event: 2025-03-14 Bobs Bakery £25.00" in text
    assert text.index("#0 | Bob's Bakery | 2025-03-31 | £25.00") < text.index("#1 | Bobs Bakery Ltd")
    assert "(empty input to leave undecided)" in text


@pytest.mark.parametrize("raw,expected", [("0", 0), ("1", 1), (" 1\n", 1)])
def test_parse_selection_by_index(raw, expected):
    assert parse_selection(raw, CANDIDATES) is CANDIDATES[expected]


@pytest.mark.parametrize("raw", ["", "   ", "\n"])
def test_empty_selection_defers(raw):
    assert parse_selection(raw, CANDIDATES) is None


@pytest.mark.parametrize("raw", ["abc", "2", "-1", "1.0", "#1"])
def test_invalid_selection_raises(raw):
    with pytest.raises(SelectionError) as exc:
        parse_selection(raw, CANDIDATES)
    assert exc.value.raw == raw
    assert exc.value.candidate_count == 2


def test_resolve_prompts_once_and_returns_choice():
    prompt = MagicMock(return_value="1")
    chosen = resolve_ambiguous_match(SHIFT, EVENT, CANDIDATES, prompt)
    assert chosen is CANDIDATES[1]
    prompt.assert_called_once()
    assert "#1 | Bobs Bakery Ltd" in prompt.call_args[0][0]


def test_resolve_does_not_reorder_candidates():
    candidates = list(CANDIDATES)
    resolve_ambiguous_match(SHIFT, EVENT, candidates, lambda text: "0")
    assert candidates == list(CANDIDATES)


def test_resolve_requires_two_candidates():
    with pytest.raises(ValueError):
        resolve_ambiguous_match(SHIFT, EVENT, CANDIDATES[:1], lambda text: "0")


def test_console_prompt_treats_eof_as_deferral(capsys):
    with patch("builtins.input", side_effect=EOFError):
        assert console_prompt("pick one") == ""
    assert "pick one" in capsys.readouterr().out


def test_console_prompt_returns_input():
    with patch("builtins.input", return_value="1"):
        assert console_prompt("pick one") == "1"
