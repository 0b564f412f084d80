import os
import copy
import hashlib
import hmac
import json
import time
import pytest
from azure.core.exceptions import ResourceNotFoundError, ResourceExistsError
from managers.table_manager import TableConnectionManager

TEST_SETTINGS = {
    "STRIPE_SECRET_KEY": "sk_test_123",
    "STRIPE_WEBHOOK_SECRET": "whsec_test_secret",
    "FLAT_PRICE": "2500",
    "FLAT_SHIPPING": "shr_test_flat",
    "GELATO_API_KEY": "gelato-test-key",
    "GELATO_ORDER_URL": "https://order.gelatoapis.com/v4/orders",
    "RETURN_ADDRESS": "John Doe,123 Main St,Anytown,CA,12345,US,returns@co,555-555-5555",
    "REPLICATE_API_TOKEN": "r8_test",
    "REPLICATE_API_URL": "https://api.replicate.com/v1/predictions",
    "AZURE_STORAGE_CONNECTION_STRING": "DefaultEndpointsProtocol=https;AccountName=teststore;AccountKey=dGVzdGtleQ==;EndpointSuffix=core.windows.net",
    "UPSCALE_ENABLED": "false",
    "PRODUCT_CHECKOUT_QUEUE_NAME": "product-created-checkout",
    "PRODUCT_UPSCALE_QUEUE_NAME": "product-created-upscale",
}


class FakeTableClient:
    """products テーブルのインメモリ実装"""

    def __init__(self):
        self.entities = {}
        self.writes = []

    def _key(self, partition_key, row_key):
        return (partition_key, row_key)

    def get_entity(self, partition_key, row_key, **kwargs):
        key = self._key(partition_key, row_key)
        if key not in self.entities:
            raise ResourceNotFoundError("Not Found")
        return copy.deepcopy(self.entities[key])

    def create_entity(self, entity, **kwargs):
        key = self._key(entity["PartitionKey"], entity["RowKey"])
        if key in self.entities:
            raise ResourceExistsError("Exists")
        self.entities[key] = dict(entity)
        self.writes.append(("create", dict(entity)))

    def update_entity(self, entity, mode=None, **kwargs):
        key = self._key(entity["PartitionKey"], entity["RowKey"])
        if key not in self.entities:
            raise ResourceNotFoundError("Not Found")
        self.entities[key].update(entity)
        self.writes.append(("update", dict(entity)))

    def delete_entity(self, partition_key, row_key, **kwargs):
        self.entities.pop(self._key(partition_key, row_key), None)
        self.writes.append(("delete", {"PartitionKey": partition_key, "RowKey": row_key}))

    def list_entities(self, **kwargs):
        return [copy.deepcopy(e) for e in self.entities.values()]

    def query_entities(self, query_filter, parameters=None, **kwargs):
        # "<field> eq @<param>" を and で連結した条件のみ扱う
        conditions = []
        for clause in query_filter.split(" and "):
            field, _, param = clause.split(" ")
            conditions.append((field, (parameters or {}).get(param.lstrip("@"))))
        return [copy.deepcopy(e) for e in self.entities.values()
                if all(e.get(field) == value for field, value in conditions)]

    def updates(self):
        return [entity for kind, entity in self.writes if kind == "update"]


class FakeTableConnectionManager:
    def __init__(self):
        self.products_table = FakeTableClient()


@pytest.fixture(scope="session", autouse=True)
def load_test_settings():
    for key, value in TEST_SETTINGS.items():
        os.environ[key] = value


@pytest.fixture
def table(monkeypatch):
    manager = FakeTableConnectionManager()
    monkeypatch.setattr(TableConnectionManager, "_instance", manager)
    return manager.products_table


@pytest.fixture
def product_entity(table):
    entity = {
        "PartitionKey": "product",
        "RowKey": "prod-1",
        "title": "Sunset over the bay",
        "image": "https://images.example.com/sunset.png",
        "stripe_product_id": "prod_stripe_1",
        "stripe_price_id": "price_1",
        "payment_link": "https://buy.stripe.com/test_1",
    }
    table.entities[("product", "prod-1")] = dict(entity)
    return entity


def sign_payload(payload: bytes, secret: str = None, timestamp: int = None) -> str:
    """Stripeと同じ方式（t=タイムスタンプ, v1=HMAC-SHA256）で署名ヘッダを作る"""
    secret = secret or TEST_SETTINGS["STRIPE_WEBHOOK_SECRET"]
    timestamp = timestamp or int(time.time())
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(secret.encode("utf-8"), signed_payload.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str = "checkout.session.completed", session: dict = None) -> bytes:
    event = {
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {"object": session if session is not None else make_session()},
    }
    return json.dumps(event).encode("utf-8")


def make_session(**overrides) -> dict:
    session = {
        "id": "cs_test_123",
        "object": "checkout.session",
        "customer": "cus_test_1",
        "metadata": {"product_id": "prod-1"},
        "customer_details": {
            "name": "Jane Buyer",
            "email": "jane@example.com",
            "phone": "+15555550100",
            "address": None,
        },
        "shipping_details": {
            "name": "Jane Buyer",
            "address": {
                "line1": "1 Market St",
                "line2": "Apt 2",
                "city": "San Francisco",
                "state": "CA",
                "postal_code": "94105",
                "country": "US",
            },
        },
    }
    session.update(overrides)
    return session
