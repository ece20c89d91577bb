#!/usr/bin/env python3
"""Replay every wallet's ledger and report inconsistencies."""

from app.core.database import SessionLocal
from app.models import Wallet
from app.services.ledger import reconcile_wallet


def main():
    db = SessionLocal()
    failures = 0
    try:
        for (wallet_id,) in db.query(Wallet.id).order_by(Wallet.created_at).all():
            report = reconcile_wallet(db, wallet_id)
            if report.consistent:
                continue
            failures += 1
            print(
                f"{report.wallet_id}: stored={report.stored_balance} replayed={report.replayed_balance} "
                f"lowest={report.lowest_balance} mismatched={report.mismatched_ids}"
            )
    finally:
        db.close()
    if failures:
        raise SystemExit(1)
    print("All wallets consistent.")


if __name__ == "__main__":
    main()
