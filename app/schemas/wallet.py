from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, PlainSerializer, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

# Monetary values leave the API as JSON numbers, not strings.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Raw numeric input; parsing and rounding happen in the service layer.
NumberLike = Union[StrictInt, StrictFloat, StrictStr]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SetupWalletRequest(BaseModel):
    name: Optional[str] = None
    balance: Optional[NumberLike] = None


class TransactRequest(BaseModel):
    amount: Optional[NumberLike] = None
    description: Optional[str] = None


class SetupWalletOut(CamelModel):
    id: str
    balance: Money
    transaction_id: int
    name: str
    date: datetime


class TransactOut(CamelModel):
    balance: Money
    transaction_id: int


class WalletOut(CamelModel):
    id: str
    balance: Money
    name: str
    date: datetime
