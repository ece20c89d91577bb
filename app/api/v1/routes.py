from fastapi import APIRouter
from app.api.v1.endpoints import wallet, transactions

router = APIRouter()

router.include_router(wallet.router, tags=["wallet"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
