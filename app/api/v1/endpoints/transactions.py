from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.models import Transaction
from app.schemas.transaction import TransactionOut
from app.services.wallet import list_all_transactions, list_transactions

router = APIRouter()


def _to_out(tx: Transaction) -> TransactionOut:
    return TransactionOut(
        id=tx.id,
        wallet_id=tx.wallet_id,
        amount=tx.amount,
        balance=tx.balance,
        description=tx.description,
        date=tx.date,
        type=tx.tx_type,
    )


# Pagination arrives as raw strings so malformed values get the ledger's own 400 message.
@router.get("", response_model=list[TransactionOut])
def transactions_page(
    wallet_id: Optional[str] = Query(default=None, alias="walletId"),
    skip: str = "0",
    limit: str = "10",
    db: Session = Depends(get_db),
):
    return [_to_out(tx) for tx in list_transactions(db, wallet_id, skip, limit)]


@router.get("/all/{wallet_id}", response_model=list[TransactionOut])
def all_transactions(wallet_id: str, db: Session = Depends(get_db)):
    return [_to_out(tx) for tx in list_all_transactions(db, wallet_id)]
