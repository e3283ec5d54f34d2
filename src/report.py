from models import ReconciliationResult
from money import format_amount


def print_progress(result: ReconciliationResult):
    print()

    print("   Matched transactions:")
    for m in result.matched:
        print(
            f"     {m.event.display_description} £{format_amount(m.event.money.as_decimal())}"
            f" => {m.invoice.contact.name} £{format_amount(m.invoice.amount_due)}"
        )
    print()

    print("   Matched already paid transactions:")
    for e in result.already_paid:
        print(f"     {e.display_description} £{format_amount(e.money.as_decimal())}")
    print()

    print("   Unmatched transactions:")
    for u in result.unmatched:
        note = "" if u.reason == "no_match" else f" ({u.reason.replace('_', ' ')})"
        print(
            f"     {u.event.display_description} £{format_amount(u.event.money.as_decimal())}"
            f" {u.shift.business_date:%Y-%m-%d}{note}"
        )
    print()

    if result.anomalies:
        print("   Anomalies (not matched):")
        for a in result.anomalies:
            print(
                f"     {a.event.display_description} amount={a.event.money.amount!r}"
                f" {a.shift.business_date:%Y-%m-%d}: {a.error}"
            )
        print()
