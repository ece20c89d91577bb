"""Ledger replay checks.

A wallet is consistent when replaying its log oldest-first sums to the stored
balance, no running total dips below zero, and every recorded balance snapshot
matches the running total at that point.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import Transaction
from app.services.wallet import get_wallet
from app.utils.money import round4


@dataclass
class ReconciliationReport:
    wallet_id: str
    stored_balance: Decimal
    replayed_balance: Decimal
    transaction_count: int
    lowest_balance: Decimal
    mismatched_ids: list[int] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return (
            self.replayed_balance == self.stored_balance
            and self.lowest_balance >= 0
            and not self.mismatched_ids
        )


def reconcile_wallet(db: Session, wallet_id) -> ReconciliationReport:
    wallet = get_wallet(db, wallet_id)
    entries = (
        db.query(Transaction)
        .filter(Transaction.wallet_id == wallet.id)
        .order_by(Transaction.date.asc(), Transaction.id.asc())
        .all()
    )

    running = Decimal("0")
    lowest = Decimal("0")
    mismatched: list[int] = []
    for entry in entries:
        running = round4(running + Decimal(entry.amount))
        lowest = min(lowest, running)
        if round4(entry.balance) != running:
            mismatched.append(entry.id)

    return ReconciliationReport(
        wallet_id=wallet.id,
        stored_balance=round4(wallet.balance),
        replayed_balance=running,
        transaction_count=len(entries),
        lowest_balance=lowest,
        mismatched_ids=mismatched,
    )
