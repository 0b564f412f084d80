from typing import Optional
from models.product import Product
from managers import stripe_manager
from repository import product as product_repo
import logging

logger = logging.getLogger(__name__)


def provision_checkout(product_id: str) -> Optional[Product]:
    """
    商品作成時にStripeの商品・価格・Payment Linkを作成し、レコードへ書き戻す

    Stripeへの作成リクエストは商品IDから決まる冪等キーを使うので、
    キューメッセージが再配信されても重複作成されない。
    失敗時はレコードを削除せず例外をそのまま送出する。
    """
    product = product_repo.get_product(product_id)
    if product.payment_link:
        logger.info("Product %s already has a payment link, skipping", product_id)
        return None

    stripe_product_id = stripe_manager.create_product(product)
    stripe_price_id = stripe_manager.create_price(product, stripe_product_id)
    payment_link = stripe_manager.create_payment_link(product, stripe_price_id)

    fields = {
        "stripe_product_id": stripe_product_id,
        "stripe_price_id": stripe_price_id,
        "payment_link": payment_link,
    }
    product_repo.update_product_fields(product_id, fields)
    logger.info("Provisioned checkout for product %s: %s", product_id, payment_link)

    return product.model_copy(update=fields)
