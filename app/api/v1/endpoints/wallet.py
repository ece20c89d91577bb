from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.core.config import get_settings
from app.core.database import get_db
from app.middlewares.rate_limit import limiter
from app.schemas.wallet import SetupWalletRequest, SetupWalletOut, TransactRequest, TransactOut, WalletOut
from app.services.wallet import get_wallet, setup_wallet, transact

router = APIRouter()
settings = get_settings()


@router.post("/setup", response_model=SetupWalletOut)
@limiter.limit(settings.setup_rate_limit)
def create_wallet(request: Request, payload: SetupWalletRequest, db: Session = Depends(get_db)):
    wallet, entry = setup_wallet(db, payload.name, payload.balance)
    return SetupWalletOut(
        id=wallet.id,
        balance=wallet.balance,
        transaction_id=entry.id,
        name=wallet.name,
        date=wallet.created_at,
    )


@router.post("/transact/{wallet_id}", response_model=TransactOut)
@limiter.limit(settings.transact_rate_limit)
def process_transaction(request: Request, wallet_id: str, payload: TransactRequest, db: Session = Depends(get_db)):
    balance, entry = transact(db, wallet_id, payload.amount, payload.description)
    return TransactOut(balance=balance, transaction_id=entry.id)


@router.get("/wallet/{wallet_id}", response_model=WalletOut)
def wallet_details(wallet_id: str, db: Session = Depends(get_db)):
    wallet = get_wallet(db, wallet_id)
    return WalletOut(id=wallet.id, balance=wallet.balance, name=wallet.name, date=wallet.created_at)
