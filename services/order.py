from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone
from models.product import Product
from models.webhook import CheckoutSession, ShippingDetails, StripeAddress
from models.fulfillment import (
    ShippingContact,
    ReturnAddress,
    FulfillmentOrder,
    FulfillmentItem,
    FulfillmentFile,
)
from models.errors import (
    ProductReferenceError,
    ProductMissingError,
    CustomerDataError,
    FulfillmentError,
)
from managers import stripe_manager
from managers.gelato_manager import GelatoManager
from repository import product as product_repo
import requests
import os
import logging

logger = logging.getLogger(__name__)


class ResolvedOrder(BaseModel):
    product: Product
    contact: ShippingContact
    session_id: str
    customer_id: Optional[str] = None


def _resolve_product_id(session: CheckoutSession) -> str:
    product_id = session.product_id()
    if product_id:
        return product_id

    # 旧形式: 商品IDはStripe商品側のメタデータにのみ存在する
    # Stripe APIの失敗(stripe.StripeError)はそのまま呼び出し元へ送出する
    product_id = stripe_manager.get_line_item_product_id(session.id)
    if not product_id:
        raise ProductReferenceError("No productId")
    return product_id


def _to_contact(shipping: Optional[ShippingDetails], name: Optional[str], email: Optional[str],
                phone: Optional[str]) -> Optional[ShippingContact]:
    address: Optional[StripeAddress] = shipping.address if shipping else None
    name = (shipping.name if shipping else None) or name
    if address is None or not address.is_complete() or not name:
        return None
    return ShippingContact(
        name=name,
        address_line1=address.line1,
        address_line2=address.line2 or None,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
        email=email,
        phone=(shipping.phone if shipping else None) or phone,
    )


def _resolve_contact(session: CheckoutSession) -> ShippingContact:
    details = session.customer_details
    contact = _to_contact(
        session.shipping(),
        details.name if details else None,
        details.email if details else None,
        details.phone if details else None,
    )
    if contact:
        return contact

    if session.customer:
        customer = stripe_manager.get_customer(session.customer)
        if customer.deleted:
            raise CustomerDataError("Customer not valid")
        contact = _to_contact(customer.shipping, customer.name, customer.email, customer.phone)
        if contact:
            if not contact.email and details:
                contact.email = details.email
            return contact

    raise CustomerDataError("Customer not valid")


def resolve_order(session: CheckoutSession) -> ResolvedOrder:
    """決済完了セッションから商品と配送先を解決する"""
    product_id = _resolve_product_id(session)

    product = product_repo.find_product(product_id)
    if product is None:
        raise ProductMissingError("No product")

    contact = _resolve_contact(session)

    return ResolvedOrder(product=product, contact=contact, session_id=session.id, customer_id=session.customer)


def build_fulfillment_order(resolved: ResolvedOrder, return_address: ReturnAddress) -> FulfillmentOrder:
    return FulfillmentOrder(
        orderReferenceId=resolved.session_id,
        customerReferenceId=resolved.customer_id or resolved.session_id,
        items=[
            FulfillmentItem(
                itemReferenceId=resolved.session_id,
                files=[FulfillmentFile(url=resolved.product.fulfillment_image())],
            )
        ],
        shippingAddress=resolved.contact.to_shipping_address(),
        returnAddress=return_address,
    )


def submit_fulfillment(resolved: ResolvedOrder) -> FulfillmentOrder:
    """
    印刷注文を発注し、商品の最終注文日時を記録する

    orderReferenceIdにセッションIDを使うため、同じセッションの再送は
    発注先で重複注文として抑止される。
    """
    try:
        # 返送先は呼び出しごとに読み込む
        return_address = ReturnAddress.parse(os.getenv("RETURN_ADDRESS", ""))
    except ValueError as e:
        logger.error("Invalid RETURN_ADDRESS: %s", e)
        raise FulfillmentError("Gelato Order Failed")

    order = build_fulfillment_order(resolved, return_address)

    try:
        response = GelatoManager().create_order(order)
    except requests.exceptions.RequestException as e:
        logger.error("Gelato order %s failed: %s", order.orderReferenceId, e)
        raise FulfillmentError("Gelato Order Failed")

    if not 200 <= response.status_code < 300:
        logger.error("Gelato order %s rejected (%s): %s", order.orderReferenceId, response.status_code, response.text)
        raise FulfillmentError("Gelato Order Failed")

    try:
        product_repo.update_product_fields(resolved.product.id, {"last_ordered": datetime.now(timezone.utc)})
    except ValueError as e:
        # 発注は成立しているため記録失敗は応答に影響させない
        logger.exception("Failed to record last_ordered for product %s: %s", resolved.product.id, e)

    return order
