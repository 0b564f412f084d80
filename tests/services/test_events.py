from unittest.mock import patch
from models.product import Product
from services.events import publish_product_created, handle_product_created_checkout, handle_product_created_upscale
import json
import pytest


def test_publish_to_checkout_queue_only(monkeypatch):
    monkeypatch.setenv("UPSCALE_ENABLED", "false")
    product = Product(id="prod-3", title="Lake", image="https://img/lake.png")

    with patch("services.events.QueueConnectionManager") as manager:
        queues = publish_product_created(product)

    assert queues == ["product-created-checkout"]
    manager.return_value.send.assert_called_once_with("product-created-checkout", json.dumps({"product_id": "prod-3"}, separators=(",", ":")))


def test_publish_to_upscale_queue_when_enabled(monkeypatch):
    monkeypatch.setenv("UPSCALE_ENABLED", "true")
    product = Product(id="prod-3", title="Lake", image="https://img/lake.png")

    with patch("services.events.QueueConnectionManager") as manager:
        queues = publish_product_created(product)

    assert queues == ["product-created-checkout", "product-created-upscale"]
    assert manager.return_value.send.call_count == 2


def test_handlers_dispatch_product_id():
    with patch("services.events.provision_checkout") as provision:
        handle_product_created_checkout('{"product_id": "prod-4"}')
    provision.assert_called_once_with("prod-4")

    with patch("services.events.upscale_product") as upscale:
        handle_product_created_upscale('{"product_id": "prod-4"}')
    upscale.assert_called_once_with("prod-4")


def test_queue_name_setting_is_required(monkeypatch):
    monkeypatch.delenv("PRODUCT_CHECKOUT_QUEUE_NAME")
    product = Product(id="prod-3", title="Lake", image="https://img/lake.png")

    with patch("services.events.QueueConnectionManager") as manager:
        with pytest.raises(KeyError):
            publish_product_created(product)

    manager.return_value.send.assert_not_called()
