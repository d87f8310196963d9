"""
Stripe Checkout integration. The ledger itself lives in stores; this module
only talks to the processor.
"""
import logging

import stripe
from django.conf import settings

from .exceptions import NotConfigured, UpstreamFailure

logger = logging.getLogger(__name__)

PRODUCT_NAME = "Donation to BloodLine"

# Currencies Stripe charges in whole units (no minor unit)
ZERO_DECIMAL_CURRENCIES = {
    'bif', 'clp', 'djf', 'gnf', 'jpy', 'kmf', 'krw', 'mga',
    'pyg', 'rwf', 'ugx', 'vnd', 'vuv', 'xaf', 'xof', 'xpf',
}


def minor_unit_factor(currency):
    return 1 if currency.lower() in ZERO_DECIMAL_CURRENCIES else 100


def _api_key():
    if not settings.STRIPE_SECRET_KEY:
        raise NotConfigured()
    return settings.STRIPE_SECRET_KEY


def create_checkout_session(amount, name, email):
    api_key = _api_key()
    try:
        session = stripe.checkout.Session.create(
            api_key=api_key,
            mode="payment",
            payment_method_types=["card"],
            customer_email=email,
            line_items=[{
                "price_data": {
                    "currency": settings.STRIPE_CURRENCY,
                    "product_data": {"name": PRODUCT_NAME},
                    "unit_amount": int(round(amount * minor_unit_factor(settings.STRIPE_CURRENCY))),
                },
                "quantity": 1,
            }],
            metadata={"name": name or "", "email": email},
            success_url=f"{settings.CLIENT_URL}/funding/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{settings.CLIENT_URL}/funding",
        )
    except stripe.StripeError as e:
        logger.exception("Stripe checkout session creation failed")
        raise UpstreamFailure(f"Could not create checkout session: {e.user_message or e}")

    return {"id": session.id, "url": session.url}


def retrieve_session(session_id):
    api_key = _api_key()
    try:
        return stripe.checkout.Session.retrieve(session_id, api_key=api_key)
    except stripe.StripeError as e:
        logger.exception("Stripe session lookup failed for %s", session_id)
        raise UpstreamFailure(f"Could not verify payment: {e.user_message or e}")


def session_summary(session):
    """Flatten a paid session into the fields the ledger stores."""
    metadata = getattr(session, "metadata", None)
    amount_total = getattr(session, "amount_total", None) or 0
    currency = getattr(session, "currency", None) or settings.STRIPE_CURRENCY
    return {
        "transaction_id": getattr(session, "payment_intent", None) or session.id,
        "name": getattr(metadata, "name", None),
        "email": getattr(session, "customer_email", None) or getattr(metadata, "email", None),
        "amount": amount_total / minor_unit_factor(currency),
    }
