from fastapi import APIRouter

from api.api_v1.endpoints import (
    transactions,
    vaults,
    wallets,
)

api_router = APIRouter()

api_router.include_router(
    vaults.router, prefix="/vaults"
)
api_router.include_router(
    wallets.router, prefix="/wallets"
)
api_router.include_router(
    transactions.router, prefix="/transactions"
)
api_router.redirect_slashes = False
