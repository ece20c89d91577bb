from decimal import Decimal
import uuid

import pytest
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, build_engine
from app.core.errors import InsufficientFundsError, NotFoundError, StoreError, ValidationError
from app.models import DESCRIPTION_MAX_LENGTH, NAME_MAX_LENGTH, Transaction, TransactionType, Wallet
from app.services.ledger import reconcile_wallet
from app.services.wallet import (
    get_wallet,
    list_all_transactions,
    list_transactions,
    setup_wallet,
    transact,
)


def _count_transactions(db, wallet_id):
    return db.query(Transaction).filter(Transaction.wallet_id == wallet_id).count()


def test_setup_creates_wallet_and_setup_transaction(db):
    wallet, entry = setup_wallet(db, "  Test  ", 100.5678)

    assert wallet.name == "Test"
    assert wallet.balance == Decimal("100.5678")
    assert entry.wallet_id == wallet.id
    assert entry.amount == Decimal("100.5678")
    assert entry.balance == Decimal("100.5678")
    assert entry.description == "Setup"
    assert entry.tx_type == TransactionType.CREDIT


def test_setup_rounds_initial_balance(db):
    wallet, _ = setup_wallet(db, "Precision", 100.56789)
    assert wallet.balance == Decimal("100.5679")


def test_setup_defaults_balance_to_zero(db):
    wallet, entry = setup_wallet(db, "Empty")
    assert wallet.balance == Decimal("0")
    assert entry.amount == Decimal("0")


@pytest.mark.parametrize("name", [None, "", "   "])
def test_setup_requires_name(db, name):
    with pytest.raises(ValidationError, match="Wallet name is required"):
        setup_wallet(db, name, 10)
    assert db.query(Wallet).count() == 0


def test_setup_rejects_overlong_name(db):
    with pytest.raises(ValidationError, match="Wallet name must be at most"):
        setup_wallet(db, "x" * (NAME_MAX_LENGTH + 1), 10)
    assert db.query(Wallet).count() == 0

    wallet, _ = setup_wallet(db, "x" * NAME_MAX_LENGTH, 10)
    assert len(wallet.name) == NAME_MAX_LENGTH


@pytest.mark.parametrize("balance", ["abc", float("nan"), -5])
def test_setup_rejects_invalid_balance(db, balance):
    with pytest.raises(ValidationError, match="Invalid balance value"):
        setup_wallet(db, "Bad", balance)
    assert db.query(Wallet).count() == 0


def test_ledger_scenario(db):
    wallet, _ = setup_wallet(db, "Test", 100.5678)

    balance, entry = transact(db, wallet.id, 50.1234)
    assert balance == Decimal("150.6912")
    assert entry.tx_type == TransactionType.CREDIT
    assert entry.balance == Decimal("150.6912")
    assert entry.description == "Credit"

    with pytest.raises(InsufficientFundsError):
        transact(db, wallet.id, -200)
    assert get_wallet(db, wallet.id).balance == Decimal("150.6912")

    balance, entry = transact(db, wallet.id, "-150.6912", "Withdrawal")
    assert balance == Decimal("0")
    assert entry.tx_type == TransactionType.DEBIT
    assert entry.description == "Withdrawal"
    assert _count_transactions(db, wallet.id) == 3


def test_debit_defaults_description(db):
    wallet, _ = setup_wallet(db, "Test", 10)
    _, entry = transact(db, wallet.id, -2.5)
    assert entry.description == "Debit"
    assert entry.amount == Decimal("-2.5000")


@pytest.mark.parametrize("amount", [0, "0", 0.00001, -0.00004])
def test_zero_amount_is_rejected(db, amount):
    wallet, _ = setup_wallet(db, "Test", 10)
    with pytest.raises(ValidationError, match="Invalid amount value"):
        transact(db, wallet.id, amount)
    assert _count_transactions(db, wallet.id) == 1


def test_zero_is_rejected_for_empty_wallet(db):
    wallet, _ = setup_wallet(db, "Test")
    with pytest.raises(ValidationError):
        transact(db, wallet.id, 0)


@pytest.mark.parametrize("amount", [None, "abc", "", float("inf")])
def test_invalid_amount_is_rejected(db, amount):
    wallet, _ = setup_wallet(db, "Test", 10)
    with pytest.raises(ValidationError):
        transact(db, wallet.id, amount)


def test_overlong_description_is_rejected(db):
    wallet, _ = setup_wallet(db, "Test", 10)
    with pytest.raises(ValidationError, match="Description must be at most"):
        transact(db, wallet.id, -1, "x" * (DESCRIPTION_MAX_LENGTH + 1))

    db.expire_all()
    assert get_wallet(db, wallet.id).balance == Decimal("10")
    assert _count_transactions(db, wallet.id) == 1

    _, entry = transact(db, wallet.id, -1, "x" * DESCRIPTION_MAX_LENGTH)
    assert len(entry.description) == DESCRIPTION_MAX_LENGTH


def test_transact_validates_wallet_id_before_amount(db):
    with pytest.raises(ValidationError, match="Invalid wallet ID"):
        transact(db, "not-a-wallet", 0)


def test_transact_unknown_wallet(db):
    with pytest.raises(NotFoundError):
        transact(db, str(uuid.uuid4()), 10)


def test_failed_insert_leaves_balance_untouched(db):
    wallet, _ = setup_wallet(db, "Atomic", 100)
    wallet_id = wallet.id

    def _fail_insert(mapper, connection, target):
        raise SQLAlchemyError("simulated insert failure")

    event.listen(Transaction, "before_insert", _fail_insert)
    try:
        with pytest.raises(StoreError):
            transact(db, wallet_id, -40)
    finally:
        event.remove(Transaction, "before_insert", _fail_insert)

    db.expire_all()
    assert get_wallet(db, wallet_id).balance == Decimal("100")
    assert _count_transactions(db, wallet_id) == 1


def test_failed_setup_writes_nothing(db):
    def _fail_insert(mapper, connection, target):
        raise SQLAlchemyError("simulated insert failure")

    event.listen(Transaction, "before_insert", _fail_insert)
    try:
        with pytest.raises(StoreError):
            setup_wallet(db, "Atomic", 10)
    finally:
        event.remove(Transaction, "before_insert", _fail_insert)

    assert db.query(Wallet).count() == 0


def test_overlapping_debits_on_file_store_cannot_overdraw(tmp_path):
    file_engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}", connect_args={"timeout": 0.2})
    Base.metadata.create_all(bind=file_engine)
    make_session = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    first, second = make_session(), make_session()
    outcome = {}

    def _interleave(session, flush_context, instances):
        # Runs once, after the first debit has read the balance and before it writes.
        if outcome:
            return
        try:
            outcome["result"] = transact(second, wallet_id, -100)
        except (InsufficientFundsError, StoreError) as exc:
            outcome["error"] = exc

    try:
        wallet, _ = setup_wallet(first, "Race", 100)
        wallet_id = wallet.id

        event.listen(first, "before_flush", _interleave)
        balance, _ = transact(first, wallet_id, -100)
        event.remove(first, "before_flush", _interleave)
        first.close()

        assert balance == Decimal("0")
        assert "result" not in outcome
        assert isinstance(outcome["error"], (InsufficientFundsError, StoreError))

        with pytest.raises(InsufficientFundsError):
            transact(second, wallet_id, -100)

        check = make_session()
        try:
            assert get_wallet(check, wallet_id).balance == Decimal("0")
            assert _count_transactions(check, wallet_id) == 2
            assert reconcile_wallet(check, wallet_id).consistent
        finally:
            check.close()
    finally:
        first.close()
        second.close()
        file_engine.dispose()


def test_list_transactions_pages_newest_first(db):
    wallet, _ = setup_wallet(db, "Paged", 1)
    for amount in range(2, 16):
        transact(db, wallet.id, amount)

    page = list_transactions(db, wallet.id, skip=1, limit=5)

    assert [int(tx.amount) for tx in page] == [14, 13, 12, 11, 10]


def test_list_transactions_accepts_string_pagination(db):
    wallet, _ = setup_wallet(db, "Paged", 1)
    transact(db, wallet.id, 2)
    assert len(list_transactions(db, wallet.id, "0", "1")) == 1


@pytest.mark.parametrize("skip,limit", [(-1, 5), (0, 0), (0, -3), ("x", 5), (0, "ten")])
def test_list_transactions_rejects_bad_pagination(db, skip, limit):
    wallet, _ = setup_wallet(db, "Paged", 1)
    with pytest.raises(ValidationError, match="Invalid pagination parameters"):
        list_transactions(db, wallet.id, skip, limit)


def test_list_transactions_unknown_wallet(db):
    with pytest.raises(NotFoundError):
        list_transactions(db, str(uuid.uuid4()), 0, 10)


def test_list_all_transactions_returns_full_log(db):
    wallet, _ = setup_wallet(db, "Export", 5)
    for _ in range(12):
        transact(db, wallet.id, 1)

    rows = list_all_transactions(db, wallet.id)

    assert len(rows) == 13
    assert rows[0].balance == Decimal("17")
    assert rows[-1].description == "Setup"


def test_get_wallet_rejects_malformed_id(db):
    with pytest.raises(ValidationError):
        get_wallet(db, "123")
