from datetime import datetime

from app.models.transaction import TransactionType
from app.schemas.wallet import CamelModel, Money


class TransactionOut(CamelModel):
    id: int
    wallet_id: str
    amount: Money
    balance: Money
    description: str
    date: datetime
    type: TransactionType
