"""
Stripe billing: one-time activation and credit checkouts, the customer portal,
the legacy monthly subscription, and the webhook that turns completed
payments into profile updates.
"""
import json
import logging
import math
import re
from typing import Any, Dict, Optional, Union

import stripe
from fastapi import HTTPException

from menuforge.config import settings
from menuforge.modules.billing.schemas import (
    CheckoutResponse, SyncSubscriptionResponse, CreateSubscriptionResponse, WebhookResponse
)
from menuforge.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

ACTIVATION_PRODUCT = "MenuForge Activation"
CREDIT_PRODUCT = "MenuForge Credit"
SUBSCRIPTION_PRODUCT = "MenuForge Pro"

# name -> Stripe product id (or price id for the subscription), resolved once per process
_PRODUCT_CACHE: Dict[str, str] = {}

ACTIVE_STATUSES = ("active", "trialing")

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def clear_product_cache() -> None:
    _PRODUCT_CACHE.clear()


def parse_credit_quantity(quantity: Optional[Union[int, float, str]]) -> int:
    """
    Clamp a requested credit quantity to [1, max]. Fractions are truncated and
    strings are read up to their leading integer ("2.5" and "12 credits" give 2
    and 12); missing, zero or unparseable means the default pack.
    """
    if isinstance(quantity, (int, float)) and not isinstance(quantity, bool):
        value = int(quantity) if math.isfinite(quantity) else 0
    else:
        match = _LEADING_INT.match(quantity) if isinstance(quantity, str) else None
        value = int(match.group(0)) if match else 0
    if value == 0:
        value = settings.default_credit_quantity
    return min(max(value, 1), settings.max_credit_quantity)


class BillingService:
    def __init__(self, profiles: ProfileService):
        self.profiles = profiles
        if settings.stripe_secret_key:
            stripe.api_key = settings.stripe_secret_key
            stripe.api_version = settings.stripe_api_version

    def _require_stripe(self, message: str = "Stripe not configured") -> None:
        if not settings.stripe_enabled:
            raise HTTPException(status_code=400, detail=message)

    def _get_or_create_product(self, name: str, description: str) -> str:
        if name in _PRODUCT_CACHE:
            return _PRODUCT_CACHE[name]
        products = stripe.Product.search(query=f"name:'{name}'", limit=1)
        if products.data:
            product_id = products.data[0].id
        else:
            product_id = stripe.Product.create(name=name, description=description).id
            logger.info(f"Created Stripe product {name} ({product_id})")
        _PRODUCT_CACHE[name] = product_id
        return product_id

    def _get_subscription_price(self) -> str:
        if SUBSCRIPTION_PRODUCT in _PRODUCT_CACHE:
            return _PRODUCT_CACHE[SUBSCRIPTION_PRODUCT]
        prices = stripe.Price.search(query=f"product.name:'{SUBSCRIPTION_PRODUCT}'", limit=1)
        if prices.data:
            price_id = prices.data[0].id
        else:
            product = stripe.Product.create(
                name=SUBSCRIPTION_PRODUCT,
                description="Monthly subscription for MenuForge",
            )
            price_id = stripe.Price.create(
                product=product.id,
                unit_amount=settings.subscription_price_cents,
                currency=settings.stripe_currency,
                recurring={"interval": "month"},
            ).id
        _PRODUCT_CACHE[SUBSCRIPTION_PRODUCT] = price_id
        return price_id

    def _ensure_customer(self, user_id: str, email: Optional[str], existing: Optional[str]) -> str:
        if existing:
            return existing
        customer = stripe.Customer.create(email=email, metadata={"userId": user_id})
        logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
        return customer.id

    def _one_time_checkout(
        self,
        customer_id: str,
        product_id: str,
        unit_amount: int,
        quantity: int,
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutResponse:
        session = stripe.checkout.Session.create(
            mode="payment",
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": settings.stripe_currency,
                    "product": product_id,
                    "unit_amount": unit_amount,
                },
                "quantity": quantity,
            }],
            metadata=metadata,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        return CheckoutResponse(url=session.url)

    def create_activation_checkout(self, user_data: Dict[str, Any], base_url: str) -> CheckoutResponse:
        """Checkout for the one-time activation fee"""
        self._require_stripe("Payment system is not enabled")
        user_id = user_data["id"]
        profile = self.profiles.get_profile(user_id)
        if profile and profile.has_activated:
            raise HTTPException(status_code=400, detail="Account already activated")
        try:
            customer_id = self._ensure_customer(
                user_id, user_data.get("email"), profile.stripe_customer_id if profile else None
            )
            product_id = self._get_or_create_product(
                ACTIVATION_PRODUCT,
                f"One-time activation fee for MenuForge - includes unlimited downloads + "
                f"{settings.activation_credits} menu generation credits",
            )
            return self._one_time_checkout(
                customer_id,
                product_id,
                settings.activation_price_cents,
                1,
                {"userId": user_id, "type": "activation"},
                f"{base_url}/dashboard?payment=success&type=activation",
                f"{base_url}/dashboard?payment=cancelled",
            )
        except stripe.StripeError as e:
            logger.error(f"Activation checkout error for user {user_id}: {e}")
            raise HTTPException(
                status_code=500,
                detail=getattr(e, "user_message", None) or "Failed to create activation checkout"
            )

    def create_credits_checkout(
        self,
        user_data: Dict[str, Any],
        base_url: str,
        quantity: Optional[Union[int, float, str]] = None
    ) -> CheckoutResponse:
        """Checkout for a pack of generation credits; the account must be activated first"""
        self._require_stripe("Payment system is not enabled")
        user_id = user_data["id"]
        credit_quantity = parse_credit_quantity(quantity)
        profile = self.profiles.get_profile(user_id)
        if not profile or not profile.has_activated:
            raise HTTPException(
                status_code=400,
                detail="Please activate your account first before purchasing credits"
            )
        try:
            customer_id = self._ensure_customer(user_id, user_data.get("email"), profile.stripe_customer_id)
            product_id = self._get_or_create_product(CREDIT_PRODUCT, "Menu generation credit for MenuForge")
            return self._one_time_checkout(
                customer_id,
                product_id,
                settings.credit_price_cents,
                credit_quantity,
                {"userId": user_id, "type": "credits", "quantity": str(credit_quantity)},
                f"{base_url}/dashboard?payment=success&type=credits&quantity={credit_quantity}",
                f"{base_url}/dashboard?payment=cancelled",
            )
        except stripe.StripeError as e:
            logger.error(f"Credits checkout error for user {user_id}: {e}")
            raise HTTPException(
                status_code=500,
                detail=getattr(e, "user_message", None) or "Failed to create credits checkout"
            )

    def create_portal_session(self, email: Optional[str], base_url: str) -> CheckoutResponse:
        """Billing portal for the Stripe customer with this email"""
        self._require_stripe()
        if not email:
            raise HTTPException(status_code=400, detail="Email is required")
        try:
            customers = stripe.Customer.list(email=email, limit=1)
            if not customers.data:
                raise HTTPException(status_code=404, detail="No subscription found for this email")
            portal_session = stripe.billing_portal.Session.create(
                customer=customers.data[0].id,
                return_url=f"{base_url}/subscribe",
            )
            return CheckoutResponse(url=portal_session.url)
        except stripe.StripeError as e:
            logger.error(f"Stripe portal error for {email}: {e}")
            raise HTTPException(
                status_code=500,
                detail=getattr(e, "user_message", None) or "Failed to open customer portal"
            )

    def sync_subscription(self, user_data: Dict[str, Any]) -> SyncSubscriptionResponse:
        """Pull the caller's subscription state from Stripe (called after the checkout redirect)"""
        self._require_stripe()
        user_id = user_data["id"]
        email = user_data.get("email")
        logger.info(f"Syncing subscription for user {user_id} ({email})")
        try:
            customers = stripe.Customer.list(email=email, limit=1)
            if not customers.data:
                logger.info(f"No Stripe customer found for {email}")
                return SyncSubscriptionResponse(synced=False, message="No Stripe customer found")
            customer = customers.data[0]

            subscription_status = "free"
            subscription_id = None
            active = stripe.Subscription.list(customer=customer.id, status="active", limit=1)
            if active.data:
                subscription_status = active.data[0].status
                subscription_id = active.data[0].id
            else:
                # Freshly completed checkouts may not be listed as active yet
                for sub in stripe.Subscription.list(customer=customer.id, limit=5).data:
                    if sub.status in ACTIVE_STATUSES:
                        subscription_status = sub.status
                        subscription_id = sub.id
                        break
        except stripe.StripeError as e:
            logger.error(f"Stripe sync error for user {user_id}: {e}")
            raise HTTPException(
                status_code=500,
                detail=getattr(e, "user_message", None) or "Failed to sync subscription"
            )

        if not self.profiles.ensure_profile(user_data):
            raise HTTPException(status_code=500, detail="Failed to create profile")

        if subscription_id:
            if not self.profiles.update_stripe_info_by_id(user_id, customer.id, subscription_id, subscription_status):
                logger.error(f"Failed to update profile stripe info for user {user_id}")

        return SyncSubscriptionResponse(
            synced=True,
            subscription_status=subscription_status,
            has_active_subscription=subscription_status in ACTIVE_STATUSES,
        )

    def create_subscription(self, user_data: Dict[str, Any]) -> CreateSubscriptionResponse:
        """Legacy monthly plan: returns the client secret of the first invoice's payment intent"""
        self._require_stripe()
        user_id = user_data["id"]
        profile = self.profiles.get_profile(user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")

        try:
            if profile.stripe_subscription_id and profile.subscription_status == "active":
                subscription = stripe.Subscription.retrieve(profile.stripe_subscription_id)
                invoice = stripe.Invoice.retrieve(subscription.latest_invoice)
                payment_intent = stripe.PaymentIntent.retrieve(invoice.payment_intent)
                return CreateSubscriptionResponse(
                    subscription_id=subscription.id,
                    client_secret=payment_intent.client_secret,
                )

            customer_id = profile.stripe_customer_id
            if not customer_id:
                customer_id = stripe.Customer.create(
                    email=profile.email or None,
                    name=profile.name or None,
                    metadata={"userId": user_id},
                ).id

            subscription = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": self._get_subscription_price()}],
                payment_behavior="default_incomplete",
                payment_settings={"save_default_payment_method": "on_subscription"},
                expand=["latest_invoice.payment_intent"],
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating subscription for user {user_id}: {e}")
            raise HTTPException(status_code=400, detail=getattr(e, "user_message", None) or str(e))

        dev_bypass = (
            settings.enable_dev_subscription_bypass
            and settings.is_development
            and not settings.stripe_webhook_secret
        )
        if dev_bypass:
            logger.warning(f"Development bypass: marking subscription active for user {user_id}")
        initial_status = "active" if dev_bypass else subscription.status

        if not self.profiles.update_stripe_info_by_id(user_id, customer_id, subscription.id, initial_status):
            logger.error(f"Failed to update profile stripe info for user {user_id}")

        invoice = subscription.latest_invoice
        payment_intent = getattr(invoice, "payment_intent", None) if invoice else None
        if not payment_intent or not getattr(payment_intent, "client_secret", None):
            raise HTTPException(status_code=400, detail="Payment intent not found on subscription")
        return CreateSubscriptionResponse(
            subscription_id=subscription.id,
            client_secret=payment_intent.client_secret,
        )

    def handle_webhook(self, payload: bytes, signature: Optional[str]) -> WebhookResponse:
        """Verify a Stripe webhook and apply it to the buyer's profile"""
        if not settings.stripe_webhook_secret:
            if settings.is_development:
                logger.warning("STRIPE_WEBHOOK_SECRET not configured in development - webhook received but not processed")
                return WebhookResponse(received=True, processed=False, reason="dev_mode_no_secret")
            logger.error("STRIPE_WEBHOOK_SECRET not configured - webhook cannot be processed")
            raise HTTPException(status_code=500, detail="Webhook secret not configured")

        if not signature:
            raise HTTPException(status_code=400, detail="Missing stripe signature")
        if not settings.stripe_secret_key:
            raise HTTPException(status_code=500, detail="Stripe not configured")

        try:
            stripe.Webhook.construct_event(payload, signature, settings.stripe_webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.error(f"Webhook signature verification failed: {e}")
            raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

        # Signature checked; work on the plain decoded payload
        event = json.loads(payload)
        self.process_event(event)
        return WebhookResponse(received=True)

    def process_event(self, event: Dict[str, Any]) -> None:
        event_type = event.get("type")
        obj = (event.get("data") or {}).get("object") or {}

        if event_type == "checkout.session.completed":
            self._handle_checkout_completed(obj)
        elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
            self._handle_subscription_change(obj, obj.get("status"))
        elif event_type == "customer.subscription.deleted":
            self._handle_subscription_change(obj, "canceled")
        else:
            logger.info(f"Unhandled event type {event_type}")

    def _handle_checkout_completed(self, session: Dict[str, Any]) -> None:
        customer_id = session.get("customer")
        metadata = session.get("metadata") or {}
        payment_type = metadata.get("type")
        user_id = metadata.get("userId")
        logger.info(f"Checkout completed: type={payment_type}, userId={user_id}, customerId={customer_id}")

        if not user_id:
            logger.error("No userId in session metadata")
            return

        if payment_type == "activation":
            if not self.profiles.activate_user(user_id, customer_id):
                logger.error(f"Failed to activate user {user_id}")
        elif payment_type == "credits":
            quantity = parse_credit_quantity(metadata.get("quantity"))
            if not self.profiles.add_credits(user_id, quantity):
                logger.error(f"Failed to add {quantity} credits to user {user_id}")
        elif session.get("subscription"):
            email = session.get("customer_email") or (session.get("customer_details") or {}).get("email")
            if email:
                self.profiles.update_stripe_info(email, customer_id, session["subscription"], "active")

    def _handle_subscription_change(self, subscription: Dict[str, Any], status: Optional[str]) -> None:
        customer_id = subscription.get("customer")
        if not customer_id:
            return
        try:
            customer = stripe.Customer.retrieve(customer_id)
        except stripe.StripeError as e:
            logger.error(f"Could not retrieve Stripe customer {customer_id}: {e}")
            return
        email = getattr(customer, "email", None)
        if email:
            self.profiles.update_stripe_info(email, customer_id, subscription.get("id"), status)
        else:
            logger.warning(f"Stripe customer {customer_id} has no email; subscription {subscription.get('id')} not recorded")
