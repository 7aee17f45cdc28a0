from fastapi import APIRouter, Depends, Header, Request
from menuforge.modules.billing.schemas import (
    ActivationCheckoutRequest, CreditsCheckoutRequest, PortalRequest, CheckoutResponse,
    SyncSubscriptionResponse, CreateSubscriptionResponse, WebhookResponse
)
from menuforge.modules.billing.service import BillingService
from menuforge.modules.profiles.service import ProfileService
from menuforge.core.dependencies import get_current_user, get_profile_service
from typing import Dict, Optional

router = APIRouter(tags=["billing"])


def get_billing_service(profiles: ProfileService = Depends(get_profile_service)) -> BillingService:
    return BillingService(profiles)


def _base_url(request: Request, return_url: Optional[str]) -> str:
    return (return_url or f"https://{request.headers.get('host', 'localhost')}").rstrip("/")


@router.post("/pay/activate", response_model=CheckoutResponse)
async def pay_activation(
    request: Request,
    body: ActivationCheckoutRequest = ActivationCheckoutRequest(),
    user_data: Dict = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Start a Stripe checkout for the one-time activation"""
    return service.create_activation_checkout(user_data, _base_url(request, body.return_url))


@router.post("/pay/credits", response_model=CheckoutResponse)
async def pay_credits(
    request: Request,
    body: CreditsCheckoutRequest = CreditsCheckoutRequest(),
    user_data: Dict = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Start a Stripe checkout for additional credits (1-100, default 5)"""
    return service.create_credits_checkout(user_data, _base_url(request, body.return_url), body.quantity)


@router.post("/stripe/portal", response_model=CheckoutResponse)
async def open_portal(
    request: Request,
    body: PortalRequest,
    service: BillingService = Depends(get_billing_service),
):
    """Open the Stripe billing portal for a customer email"""
    return service.create_portal_session(body.email, _base_url(request, body.return_url))


@router.post("/stripe/sync-subscription", response_model=SyncSubscriptionResponse)
async def sync_subscription(
    user_data: Dict = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Refresh the caller's subscription status from Stripe"""
    return service.sync_subscription(user_data)


@router.post("/create-subscription", response_model=CreateSubscriptionResponse)
async def create_subscription(
    user_data: Dict = Depends(get_current_user),
    service: BillingService = Depends(get_billing_service),
):
    """Legacy monthly subscription"""
    return service.create_subscription(user_data)


@router.post("/webhook/stripe", response_model=WebhookResponse, response_model_exclude_none=True)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    service: BillingService = Depends(get_billing_service),
):
    """Stripe webhook: activation and credit purchases, subscription status changes"""
    payload = await request.body()
    return service.handle_webhook(payload, stripe_signature)
