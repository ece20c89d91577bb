import uuid

from sqlalchemy import Column, String, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import TimestampMixin


NAME_MAX_LENGTH = 255


def new_wallet_id() -> str:
    return str(uuid.uuid4())


class Wallet(Base, TimestampMixin):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),)

    id = Column(String(36), primary_key=True, default=new_wallet_id)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    balance = Column(Numeric(18, 4), default=0, nullable=False)

    transactions = relationship("Transaction", back_populates="wallet", order_by="Transaction.date")
