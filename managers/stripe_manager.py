from typing import Optional, Dict, Any
from models.product import Product
from models.webhook import StripeCustomer
import stripe
import json
import os
import logging

logger = logging.getLogger(__name__)


def _configure():
    stripe.api_key = os.getenv("STRIPE_SECRET_KEY")


def _to_dict(stripe_object) -> Dict[str, Any]:
    return json.loads(str(stripe_object))


def create_product(product: Product) -> str:
    _configure()
    stripe_product = stripe.Product.create(
        name=product.title,
        images=[product.image],
        type="good",
        metadata={"product_id": product.id},
        idempotency_key=f"product-{product.id}",
    )
    return stripe_product.id


def create_price(product: Product, stripe_product_id: str) -> str:
    _configure()
    stripe_price = stripe.Price.create(
        product=stripe_product_id,
        unit_amount=int(os.getenv("FLAT_PRICE")),
        currency="usd",
        tax_behavior="exclusive",
        idempotency_key=f"price-{product.id}",
    )
    return stripe_price.id


def create_payment_link(product: Product, stripe_price_id: str) -> str:
    _configure()
    payment_link = stripe.PaymentLink.create(
        line_items=[{"price": stripe_price_id, "quantity": 1}],
        automatic_tax={"enabled": True},
        phone_number_collection={"enabled": True},
        shipping_address_collection={"allowed_countries": ["US"]},
        shipping_options=[{"shipping_rate": os.getenv("FLAT_SHIPPING")}],
        metadata={"product_id": product.id},
        idempotency_key=f"payment-link-{product.id}",
    )
    return payment_link.url


def get_line_item_product_id(session_id: str) -> Optional[str]:
    """line_itemsを展開してセッションを再取得し、Stripe商品のメタデータから商品IDを取り出す"""
    _configure()
    session = _to_dict(stripe.checkout.Session.retrieve(session_id, expand=["line_items.data.price.product"]))
    line_items = (session.get("line_items") or {}).get("data") or []
    for line_item in line_items:
        stripe_product = (line_item.get("price") or {}).get("product")
        if isinstance(stripe_product, dict):
            product_id = (stripe_product.get("metadata") or {}).get("product_id")
            if product_id:
                return product_id
    logger.info("No product_id in line items of session %s", session_id)
    return None


def get_customer(customer_id: str) -> StripeCustomer:
    _configure()
    customer = stripe.Customer.retrieve(customer_id)
    return StripeCustomer.model_validate(_to_dict(customer))
