from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal
from datetime import datetime, timezone
from azure.data.tables import TableEntity
import uuid


class Product(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    image: str
    upscaled_image: Optional[str] = None
    stripe_product_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    payment_link: Optional[str] = None
    last_ordered: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

    def fulfillment_image(self) -> str:
        """印刷に使う画像URL（アップスケール済みがあれば優先）"""
        return self.upscaled_image or self.image

    def set_timestamp(self, mode: Literal['create', 'order']):
        if mode == 'create':
            self.created_at = datetime.now(timezone.utc)
        elif mode == 'order':
            self.last_ordered = datetime.now(timezone.utc)


class ProductTableEntity(BaseModel):
    PartitionKey: str = "product"
    RowKey: str
    title: str
    image: str
    upscaled_image: Optional[str] = None
    stripe_product_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    payment_link: Optional[str] = None
    last_ordered: Optional[str] = None
    created_at: Optional[str] = None

    def to_product(self) -> Product:
        deserialized_last_ordered = datetime.fromisoformat(self.last_ordered) if self.last_ordered else None
        deserialized_created_at = datetime.fromisoformat(self.created_at) if self.created_at else None
        return Product(id=self.RowKey, last_ordered=deserialized_last_ordered, created_at=deserialized_created_at,
                       **self.model_dump(exclude={"PartitionKey", "RowKey", "last_ordered", "created_at"}))

    @classmethod
    def from_product(cls, product: Product) -> "ProductTableEntity":
        serialized_last_ordered = product.last_ordered.isoformat() if product.last_ordered else None
        serialized_created_at = product.created_at.isoformat() if product.created_at else None
        return cls(RowKey=product.id, last_ordered=serialized_last_ordered, created_at=serialized_created_at,
                   **product.model_dump(exclude={"id", "last_ordered", "created_at"}))

    @classmethod
    def from_entity(cls, entity: TableEntity):
        entity_dict = dict(entity)
        table_entity = ProductTableEntity.model_validate(entity_dict)
        return table_entity

    @staticmethod
    def serialize_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        """部分更新用にフィールド値をテーブル格納形式へ変換する"""
        serialized = {}
        for key, value in fields.items():
            if isinstance(value, datetime):
                value = value.isoformat()
            serialized[key] = value
        return serialized


class ProductCreatedEvent(BaseModel):
    product_id: str
