from pydantic import BaseModel
from typing import Optional, Union


class ActivationCheckoutRequest(BaseModel):
    return_url: Optional[str] = None


class CreditsCheckoutRequest(BaseModel):
    return_url: Optional[str] = None
    quantity: Optional[Union[int, float, str]] = None


class PortalRequest(BaseModel):
    email: Optional[str] = None
    return_url: Optional[str] = None


class CheckoutResponse(BaseModel):
    url: str


class SyncSubscriptionResponse(BaseModel):
    synced: bool
    subscription_status: Optional[str] = None
    has_active_subscription: bool = False
    message: Optional[str] = None


class CreateSubscriptionResponse(BaseModel):
    subscription_id: str
    client_secret: str


class WebhookResponse(BaseModel):
    received: bool = True
    processed: Optional[bool] = None
    reason: Optional[str] = None
