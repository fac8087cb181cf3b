from fastapi import APIRouter
from .endpoints import (
    batch_router,
    metadata_router,
    public_list_router,
    subscription_router,
)

api_router = APIRouter()

api_router.include_router(public_list_router.router, prefix="/lists", tags=["Lists"])
api_router.include_router(subscription_router.router, prefix="/subscriptions", tags=["Subscriptions"])
api_router.include_router(batch_router.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(metadata_router.router, tags=["Metadata"])
