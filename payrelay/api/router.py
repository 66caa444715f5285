"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from payrelay.api import payments, webhooks

api_router = APIRouter()

# Payment API callbacks
api_router.include_router(webhooks.router, prefix="/payment", tags=["Webhooks"])

# Payments
api_router.include_router(payments.router, prefix="/payment", tags=["Payments"])
