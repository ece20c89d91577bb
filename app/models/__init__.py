from app.models.wallet import Wallet, NAME_MAX_LENGTH, new_wallet_id
from app.models.transaction import Transaction, TransactionType, DESCRIPTION_MAX_LENGTH

__all__ = [
    "Wallet",
    "NAME_MAX_LENGTH",
    "new_wallet_id",
    "Transaction",
    "TransactionType",
    "DESCRIPTION_MAX_LENGTH",
]
