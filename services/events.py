from typing import List
from models.product import Product, ProductCreatedEvent
from managers.queue_manager import QueueConnectionManager
from services.checkout import provision_checkout
from services.upscale import upscale_product
import os
import logging

logger = logging.getLogger(__name__)


# キュートリガーの %PRODUCT_*_QUEUE_NAME% バインド式と同じアプリ設定を読む (未設定はKeyError)
def checkout_queue_name() -> str:
    return os.environ["PRODUCT_CHECKOUT_QUEUE_NAME"]


def upscale_queue_name() -> str:
    return os.environ["PRODUCT_UPSCALE_QUEUE_NAME"]


def upscale_enabled() -> bool:
    return os.getenv("UPSCALE_ENABLED", "false").lower() in ("1", "true", "yes")


def publish_product_created(product: Product) -> List[str]:
    """商品作成イベントを各ハンドラのキューへ送る"""
    message = ProductCreatedEvent(product_id=product.id).model_dump_json()
    queues = [checkout_queue_name()]
    if upscale_enabled():
        queues.append(upscale_queue_name())

    manager = QueueConnectionManager()
    for queue_name in queues:
        manager.send(queue_name, message)
        logger.info("Published product-created %s to %s", product.id, queue_name)
    return queues


def handle_product_created_checkout(body: str):
    event = ProductCreatedEvent.model_validate_json(body)
    return provision_checkout(event.product_id)


def handle_product_created_upscale(body: str):
    event = ProductCreatedEvent.model_validate_json(body)
    return upscale_product(event.product_id)
