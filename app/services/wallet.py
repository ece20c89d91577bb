import logging
import uuid
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.database import atomic
from app.core.errors import InsufficientFundsError, NotFoundError, ValidationError
from app.models import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, Transaction, TransactionType, Wallet, new_wallet_id
from app.utils.money import MAX_AMOUNT, parse_amount, round4

logger = logging.getLogger(__name__)

SETUP_DESCRIPTION = "Setup"


def parse_wallet_id(value) -> str:
    try:
        return str(uuid.UUID(str(value or "").strip()))
    except ValueError:
        raise ValidationError("Invalid wallet ID") from None


def parse_pagination(skip, limit) -> tuple[int, int]:
    try:
        parsed_skip = int(str(skip).strip())
        parsed_limit = int(str(limit).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid pagination parameters") from None
    if parsed_skip < 0 or parsed_limit <= 0:
        raise ValidationError("Invalid pagination parameters")
    return parsed_skip, parsed_limit


def default_description(amount: Decimal) -> str:
    return "Credit" if amount > 0 else "Debit"


def get_wallet(db: Session, wallet_id) -> Wallet:
    key = parse_wallet_id(wallet_id)
    wallet = db.get(Wallet, key)
    if not wallet:
        raise NotFoundError("Wallet not found")
    return wallet


def setup_wallet(db: Session, name, balance=None) -> tuple[Wallet, Transaction]:
    clean_name = str(name or "").strip()
    if not clean_name:
        raise ValidationError("Wallet name is required")
    if len(clean_name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Wallet name must be at most {NAME_MAX_LENGTH} characters")
    initial = parse_amount(0 if balance is None else balance, "Invalid balance value")
    if initial < 0:
        raise ValidationError("Invalid balance value")

    with atomic(db):
        wallet = Wallet(id=new_wallet_id(), name=clean_name, balance=initial)
        db.add(wallet)
        entry = Transaction(
            wallet=wallet,
            amount=initial,
            balance=initial,
            description=SETUP_DESCRIPTION,
            tx_type=TransactionType.CREDIT,
        )
        db.add(entry)

    db.refresh(wallet)
    db.refresh(entry)
    logger.info("Wallet %s created with balance %s", wallet.id, initial)
    return wallet, entry


def transact(db: Session, wallet_id, amount, description=None) -> tuple[Decimal, Transaction]:
    key = parse_wallet_id(wallet_id)
    parsed = parse_amount(amount)
    if parsed == 0:
        raise ValidationError("Invalid amount value")
    clean_description = str(description or "").strip()
    if len(clean_description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")

    with atomic(db):
        # Row lock (BEGIN IMMEDIATE on SQLite): concurrent mutations on the same wallet serialize here.
        wallet = db.query(Wallet).filter(Wallet.id == key).with_for_update().populate_existing().first()
        if not wallet:
            raise NotFoundError("Wallet not found")

        new_balance = round4(Decimal(wallet.balance) + parsed)
        if new_balance < 0:
            raise InsufficientFundsError("Insufficient funds")
        if new_balance > MAX_AMOUNT:
            raise ValidationError("Invalid amount value")

        wallet.balance = new_balance
        entry = Transaction(
            wallet_id=wallet.id,
            amount=parsed,
            balance=new_balance,
            description=clean_description or default_description(parsed),
            tx_type=TransactionType.for_amount(parsed),
        )
        db.add(entry)

    db.refresh(entry)
    logger.info("Wallet %s %s %s, balance %s", key, entry.tx_type.value, parsed, new_balance)
    return new_balance, entry


def _transactions_query(db: Session, wallet_id: str):
    return (
        db.query(Transaction)
        .filter(Transaction.wallet_id == wallet_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )


def list_transactions(db: Session, wallet_id, skip=0, limit=10) -> list[Transaction]:
    key = parse_wallet_id(wallet_id)
    offset, size = parse_pagination(skip, limit)
    wallet = get_wallet(db, key)
    return _transactions_query(db, wallet.id).offset(offset).limit(size).all()


def list_all_transactions(db: Session, wallet_id) -> list[Transaction]:
    wallet = get_wallet(db, wallet_id)
    return _transactions_query(db, wallet.id).all()
