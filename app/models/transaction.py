import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, Index, DateTime
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import utcnow


DESCRIPTION_MAX_LENGTH = 255


class TransactionType(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"

    @classmethod
    def for_amount(cls, amount) -> "TransactionType":
        return cls.CREDIT if amount >= 0 else cls.DEBIT


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 4), nullable=False)
    balance = Column(Numeric(18, 4), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False, default="")
    tx_type = Column("type", Enum(TransactionType), nullable=False)
    date = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    wallet = relationship("Wallet", back_populates="transactions")


Index("ix_transactions_wallet_id_date", Transaction.wallet_id, Transaction.date)
