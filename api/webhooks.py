from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from models.webhook import StripeEvent, CheckoutSession, CHECKOUT_SESSION_COMPLETED
from models.errors import WebhookError, SignatureError, UnexpectedEventError
from services.order import resolve_order, submit_fulfillment
import stripe
import os
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_event(payload: bytes, sig_header: str) -> StripeEvent:
    """署名を生のリクエストボディに対して検証してからイベントを復元する"""
    if not sig_header:
        raise SignatureError("Missing stripe-signature header")
    try:
        stripe.Webhook.construct_event(
            payload, sig_header, os.getenv("STRIPE_WEBHOOK_SECRET")
        )
    except ValueError as e:
        # Invalid payload
        raise SignatureError(str(e))
    except stripe.SignatureVerificationError as e:
        # Invalid signature
        raise SignatureError(str(e))

    try:
        return StripeEvent.model_validate_json(payload)
    except ValidationError as e:
        raise UnexpectedEventError(f"Invalid event payload: {e.error_count()} errors")


def process_checkout_completed(session: CheckoutSession):
    resolved = resolve_order(session)
    order = submit_fulfillment(resolved)
    logger.info("Fulfillment order %s submitted for product %s", order.orderReferenceId, resolved.product.id)
    return order


@router.post("/webhooks/stripe", tags=["webhooks"], response_class=PlainTextResponse)
async def stripe_webhook(request: Request):
    payload = await request.body()
    sig_header = request.headers.get('stripe-signature')

    try:
        event = verify_event(payload, sig_header)
        if event.type != CHECKOUT_SESSION_COMPLETED:
            raise UnexpectedEventError(event.type)

        try:
            session = event.checkout_session()
        except ValidationError:
            raise UnexpectedEventError("Invalid checkout session")
        process_checkout_completed(session)

    except WebhookError as e:
        logger.warning("Stripe webhook rejected: %s", e.message)
        return PlainTextResponse(e.to_response_text(), status_code=400)
    except (stripe.StripeError, ValueError) as e:
        logger.exception("Stripe webhook failed")
        return PlainTextResponse(f"Webhook Error: {str(e)}", status_code=400)

    return PlainTextResponse("Webhook Success", status_code=200)
