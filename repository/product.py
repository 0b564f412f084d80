from azure.data.tables import UpdateMode
from azure.core.exceptions import ResourceNotFoundError
from managers.table_manager import TableConnectionManager
from models.product import Product, ProductTableEntity
from models.query import QueryFilter
from models.errors import ProductNotFoundError
from typing import List, Optional, Dict, Any

PARTITION_KEY = "product"


def query_products(
        query_filter: QueryFilter,
        limit: int = 50,
    ) -> List[Product]:
    try:
        manager = TableConnectionManager()

        if query_filter.is_query():
            entities = list(manager.products_table.query_entities(**query_filter.model_dump(), results_per_page=limit))
        else:
            entities = list(manager.products_table.list_entities(results_per_page=limit))
        products = [ProductTableEntity.from_entity(e).to_product() for e in entities]

        return products[:limit]

    except Exception as e:
        raise ValueError(f"Error retrieving products: {str(e)}")


def find_product(product_id: str) -> Optional[Product]:
    """商品を取得する。存在しなければNoneを返す"""
    try:
        manager = TableConnectionManager()

        entity = manager.products_table.get_entity(partition_key=PARTITION_KEY, row_key=product_id)
        return ProductTableEntity.from_entity(entity).to_product()

    except ResourceNotFoundError:
        return None
    except Exception as e:
        raise ValueError(f"Error retrieving product {product_id}: {str(e)}")


def get_product(product_id: str) -> Product:
    product = find_product(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def create_product(product: Product) -> bool:
    """新しい商品を作成する"""
    try:
        manager = TableConnectionManager()
        product.set_timestamp('create')
        product_entity = ProductTableEntity.from_product(product)

        manager.products_table.create_entity(product_entity.model_dump(exclude_none=True))
        return True

    except Exception as e:
        raise ValueError(f"Error creating product: {str(e)}")


def update_product_fields(product_id: str, fields: Dict[str, Any]) -> bool:
    """指定フィールドのみを上書きする（MERGE）"""
    try:
        manager = TableConnectionManager()
        entity = {"PartitionKey": PARTITION_KEY, "RowKey": product_id}
        entity.update(ProductTableEntity.serialize_fields(fields))

        manager.products_table.update_entity(mode=UpdateMode.MERGE, entity=entity)
        return True

    except ResourceNotFoundError:
        raise ProductNotFoundError(f"Product {product_id} not found")
    except Exception as e:
        raise ValueError(f"Error updating product {product_id}: {str(e)}")


def delete_product(product_id: str) -> bool:
    """指定されたIDの商品を削除する"""
    try:
        manager = TableConnectionManager()

        manager.products_table.delete_entity(partition_key=PARTITION_KEY, row_key=product_id)
        return True

    except Exception as e:
        raise ValueError(f"Error deleting product {product_id}: {str(e)}")
