from pydantic import BaseModel
from typing import Optional, Dict, Any

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class StripeAddress(BaseModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    def is_complete(self) -> bool:
        return all([self.line1, self.city, self.state, self.postal_code, self.country])


class ShippingDetails(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[StripeAddress] = None


class CustomerDetails(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[StripeAddress] = None


class CollectedInformation(BaseModel):
    shipping_details: Optional[ShippingDetails] = None


class CheckoutSession(BaseModel):
    id: str
    customer: Optional[str] = None
    metadata: Dict[str, str] = {}
    customer_details: Optional[CustomerDetails] = None
    shipping_details: Optional[ShippingDetails] = None
    collected_information: Optional[CollectedInformation] = None

    def product_id(self) -> Optional[str]:
        return self.metadata.get("product_id") or None

    def shipping(self) -> Optional[ShippingDetails]:
        """セッションに含まれる配送先（APIバージョンにより格納場所が異なる）"""
        if self.collected_information and self.collected_information.shipping_details:
            return self.collected_information.shipping_details
        return self.shipping_details


class StripeCustomer(BaseModel):
    id: str
    deleted: bool = False
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    shipping: Optional[ShippingDetails] = None


class EventData(BaseModel):
    object: Dict[str, Any]


class StripeEvent(BaseModel):
    id: str
    type: str
    data: EventData

    def checkout_session(self) -> CheckoutSession:
        return CheckoutSession.model_validate(self.data.object)
