"""Credit card statement windows and payment reconciliation"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from ledger_lite.domain.models import (
    CardSummary,
    PaymentAllocation,
    PaymentMethod,
    StatementWindow,
    Transaction,
)
from ledger_lite.domain.exceptions import ValidationError
from ledger_lite.utils.date_utils import add_months, clamped_day, end_of_day, start_of_day, start_of_month

EPOCH = datetime(1970, 1, 1)


def current_statement_window(now: datetime, closing_day: Optional[int]) -> StatementWindow:
    """
    Compute the unpaid statement window for a card.

    Rules:
    - After the closing day of this month: (closing day + 1 of this month,
      closing day of next month]
    - On or before it: (closing day + 1 of last month, closing day of this month]
    - No closing day: the statement never closes, window is [epoch, now]

    A closing day beyond a month's length is clamped to its last day.

    Example:
        closing_day=10, now=Mar 15 -> Mar 11 00:00 .. Apr 10 23:59:59.999999
        closing_day=10, now=Mar 10 -> Feb 11 00:00 .. Mar 10 23:59:59.999999
    """
    if closing_day is None:
        return StatementWindow(start=EPOCH, end=now)

    if not 1 <= closing_day <= 31:
        raise ValidationError(f"Invalid closing day: {closing_day}")

    this_month = start_of_month(now)
    this_close = end_of_day(clamped_day(now.year, now.month, closing_day))

    if now > this_close:
        next_month = add_months(this_month, 1)
        start = start_of_day(this_close) + timedelta(days=1)
        end = end_of_day(clamped_day(next_month.year, next_month.month, closing_day))
    else:
        last_month = add_months(this_month, -1)
        last_close = clamped_day(last_month.year, last_month.month, closing_day)
        start = start_of_day(last_close) + timedelta(days=1)
        end = this_close

    return StatementWindow(start=start, end=end)


def reconcile_payment(charges: List[Transaction], payment_cents: int) -> PaymentAllocation:
    """
    Greedy FIFO settlement of unpaid card charges.

    Walks charges oldest first and settles each one the remaining payment fully
    covers. Stops at the first charge larger than the remainder: charges are
    never partially settled, and whatever is left over is reported as unapplied.
    """
    remaining = payment_cents
    settled_ids = []

    for charge in sorted(charges, key=lambda t: t.date):
        if charge.amount_cents > remaining:
            break
        settled_ids.append(charge.id)
        remaining -= charge.amount_cents

    return PaymentAllocation(
        settled_ids=settled_ids,
        settled_cents=payment_cents - remaining,
        unapplied_cents=remaining,
    )


def summarize_cards(
    statements: List[Tuple[PaymentMethod, StatementWindow, List[Transaction]]],
) -> List[CardSummary]:
    """Total each card's window, dropping cards with nothing due; largest first"""
    summaries = [
        CardSummary(
            card_id=card.id,
            card_name=card.name,
            card_bank=card.bank,
            total_cents=sum(t.amount_cents for t in charges),
            window=window,
            transactions=sorted(charges, key=lambda t: t.date),
        )
        for card, window, charges in statements
        if charges
    ]
    return sorted(summaries, key=lambda s: s.total_cents, reverse=True)
