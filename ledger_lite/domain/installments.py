"""Installment purchases: splitting, regrouping and monthly projection"""

import re
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple
from ledger_lite.domain.models import (
    Installment,
    InstallmentDetail,
    InstallmentOverview,
    MonthlyProjection,
    PaymentMethod,
    Transaction,
)
from ledger_lite.domain.exceptions import ValidationError
from ledger_lite.utils.date_utils import add_months, end_of_month, month_key, start_of_month

# "Description (X/Y)"
INSTALLMENT_PATTERN = re.compile(r"^(.*) \((\d+)/(\d+)\)$")


class ParsedInstallment(NamedTuple):
    base_description: str
    current: int
    total: int


def format_installment_description(base_description: str, current: int, total: int) -> str:
    return f"{base_description} ({current}/{total})"


def parse_installment_description(description: str) -> Optional[ParsedInstallment]:
    match = INSTALLMENT_PATTERN.match(description)
    if not match:
        return None
    return ParsedInstallment(match.group(1).strip(), int(match.group(2)), int(match.group(3)))


def base_description(description: str) -> str:
    """Strip the (X/Y) annotation if present"""
    parsed = parse_installment_description(description)
    return parsed.base_description if parsed else description


def generate_installment_schedule(
    total_cents: int,
    installment_count: int,
    start_date: datetime,
    description: str,
) -> List[Installment]:
    """
    Split a purchase into monthly installments.

    Requirements:
    - installment_count equal charges, one calendar month apart from start_date
    - Last installment absorbs the rounding remainder (< installment_count cents)
      so the group always sums to the purchase total
    - Each description is annotated "(i/n)"

    Example:
        120001 cents / 12 = 10000 base, remainder 1
        Installments 1..11: 10000, installment 12: 10001
    """
    if installment_count < 1:
        raise ValidationError("Installment count must be at least 1.")
    if total_cents <= 0:
        raise ValidationError("Purchase amount must be positive.")

    base_amount = total_cents // installment_count
    remainder = total_cents % installment_count

    return [
        Installment(
            date=add_months(start_date, i),
            amount_cents=base_amount + (remainder if i == installment_count - 1 else 0),
            description=format_installment_description(description, i + 1, installment_count),
        )
        for i in range(installment_count)
    ]


def group_installments(transactions: Iterable[Transaction]) -> Dict[uuid.UUID, List[Transaction]]:
    """Bucket grouped transactions by group_id, each bucket sorted by date"""
    groups: Dict[uuid.UUID, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.group_id is not None:
            groups[txn.group_id].append(txn)
    for members in groups.values():
        members.sort(key=lambda t: t.date)
    return dict(groups)


def summarize_installments(
    transactions: Iterable[Transaction],
    payment_methods: Dict[uuid.UUID, PaymentMethod],
    now: datetime,
) -> InstallmentOverview:
    """
    Re-aggregate installment groups into pending and completed views.

    Per group:
    - current installment: members dated up to the end of this month
    - pending amount: members dated this month or later
    - pending while any member falls in this month or later, completed otherwise

    Pending groups are ordered by pending amount, completed groups by their
    last installment date, both descending.
    """
    month_start = start_of_month(now)
    month_end = end_of_month(now)

    pending: List[InstallmentDetail] = []
    completed: List[InstallmentDetail] = []
    total_pending = 0
    total_current_month = 0

    for group_id, members in group_installments(transactions).items():
        first, last = members[0], members[-1]
        upcoming = [t for t in members if t.date >= month_start]
        pending_cents = sum(t.amount_cents for t in upcoming)
        method = payment_methods.get(first.payment_method_id)

        detail = InstallmentDetail(
            group_id=group_id,
            first_transaction_id=first.id,
            description=base_description(first.description),
            total_cents=sum(t.amount_cents for t in members),
            installment_cents=first.amount_cents,
            current_installment=sum(1 for t in members if t.date <= month_end),
            total_installments=len(members),
            pending_cents=pending_cents,
            payment_method_name=method.display_name if method else "Unknown",
            purchase_date=first.date,
            last_installment_date=last.date,
        )

        if upcoming:
            pending.append(detail)
            total_pending += pending_cents
            total_current_month += sum(t.amount_cents for t in upcoming if t.date <= month_end)
        else:
            completed.append(detail)

    return InstallmentOverview(
        pending=sorted(pending, key=lambda d: d.pending_cents, reverse=True),
        completed=sorted(completed, key=lambda d: d.last_installment_date, reverse=True),
        total_pending_cents=total_pending,
        total_current_month_cents=total_current_month,
    )


def projection_range(now: datetime, months_back: int, months_forward: int) -> Tuple[datetime, datetime]:
    """First and last instant covered by a projection around now"""
    anchor = start_of_month(now)
    return add_months(anchor, -months_back), end_of_month(add_months(anchor, months_forward))


def project_installments(
    transactions: Iterable[Transaction],
    now: datetime,
    months_back: int = 6,
    months_forward: int = 5,
) -> List[MonthlyProjection]:
    """
    Sum installment amounts per calendar month over a fixed rolling window.

    Always returns months_back + months_forward + 1 buckets, oldest first,
    zero-filled where there is no activity.
    """
    totals: Dict[str, int] = defaultdict(int)
    for txn in transactions:
        totals[month_key(txn.date)] += txn.amount_cents

    anchor = start_of_month(now)
    return [
        MonthlyProjection(month=key, total_cents=totals.get(key, 0))
        for key in (month_key(add_months(anchor, i)) for i in range(-months_back, months_forward + 1))
    ]
