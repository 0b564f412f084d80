from typing import Optional
from models.fulfillment import FulfillmentOrder
import requests
import os
import logging

logger = logging.getLogger(__name__)


class GelatoManager:
    _instance: Optional['GelatoManager'] = None
    session: Optional[requests.Session] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.session = requests.Session()
        return cls._instance

    def __init__(self):
        pass

    def create_order(self, order: FulfillmentOrder) -> requests.Response:
        """注文を作成する（orderReferenceIdで重複注文は発注先側で抑止される）"""
        response = self.session.post(
            os.getenv("GELATO_ORDER_URL", "https://order.gelatoapis.com/v4/orders"),
            json=order.to_request_body(),
            headers={
                "Content-Type": "application/json",
                "x-api-key": os.getenv("GELATO_API_KEY", ""),
            },
            timeout=30,
            allow_redirects=False,
        )
        logger.info("Gelato order %s responded %s", order.orderReferenceId, response.status_code)
        return response
