from pydantic import BaseModel, Field
from typing import List, Optional, Literal

# 5x7インチ 黒木製フレーム入りポスター
FRAMED_POSTER_PRODUCT_UID = (
    "framed_poster_mounted_130x180-mm-5x7-inch_black_wood_w12xt22-mm_plexiglass"
    "_130x180-mm-5r_170-gsm-65lb-uncoated_4-0_hor"
)


class ShippingContact(BaseModel):
    name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    email: Optional[str] = None
    phone: Optional[str] = None

    def to_shipping_address(self) -> "ShippingAddress":
        first_name, _, last_name = self.name.strip().partition(" ")
        return ShippingAddress(
            firstName=first_name,
            lastName=last_name or first_name,
            addressLine1=self.address_line1,
            addressLine2=self.address_line2,
            city=self.city,
            state=self.state,
            postCode=self.postal_code,
            country=self.country,
            email=self.email,
            phone=self.phone,
        )


class ShippingAddress(BaseModel):
    firstName: str
    lastName: str
    addressLine1: str
    addressLine2: Optional[str] = None
    city: str
    state: str
    postCode: str
    country: str
    email: Optional[str] = None
    phone: Optional[str] = None


class ReturnAddress(BaseModel):
    company_name: str = Field(serialization_alias="companyName")
    address_line1: str = Field(serialization_alias="addressLine1")
    address_line2: Optional[str] = Field(default=None, serialization_alias="addressLine2")
    city: str
    state: str
    postal_code: str = Field(serialization_alias="postCode")
    country: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "ReturnAddress":
        """
        カンマ区切りの返送先住所を解析する

        Examples:
            >>> ReturnAddress.parse("John Doe,123 Main St,Anytown,CA,12345,US,returns@co,555-555-5555")
            >>> ReturnAddress.parse("John Doe,123 Main St,Suite 4,Anytown,CA,12345,US,returns@co,555-555-5555")
        """
        fields = [f.strip() for f in (raw or "").split(",")]
        if len(fields) == 8:
            company, line1, city, state, postal, country, email, phone = fields
            line2 = None
        elif len(fields) == 9:
            company, line1, line2, city, state, postal, country, email, phone = fields
        else:
            raise ValueError(f"RETURN_ADDRESS must have 8 or 9 comma separated fields, got {len(fields)}")

        return cls(company_name=company, address_line1=line1, address_line2=line2 or None, city=city,
                   state=state, postal_code=postal, country=country, email=email or None, phone=phone or None)


class FulfillmentFile(BaseModel):
    type: str = "default"
    url: str


class FulfillmentItem(BaseModel):
    itemReferenceId: str
    productUid: str = FRAMED_POSTER_PRODUCT_UID
    files: List[FulfillmentFile]
    quantity: int = 1


class FulfillmentOrder(BaseModel):
    orderType: Literal['order', 'draft'] = 'order'
    orderReferenceId: str
    customerReferenceId: str
    currency: str = "USD"
    items: List[FulfillmentItem]
    shippingAddress: ShippingAddress
    returnAddress: ReturnAddress

    def to_request_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
