from typing import Optional
from threading import Lock
from azure.data.tables import TableServiceClient, TableClient
from azure.core.exceptions import ResourceExistsError
from azure.identity import DefaultAzureCredential
import os


class TableConnectionManager:
    _instance: Optional['TableConnectionManager'] = None
    _lock = Lock()
    client: Optional['TableServiceClient'] = None
    products_table: Optional['TableClient'] = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    def get_client():
                        credential = DefaultAzureCredential()
                        return TableServiceClient(
                            endpoint=os.getenv("AZURE_COSMOSDB_ENDPOINT"),
                            credential=credential
                        )

                    def get_table_client(table_name: str, client: TableServiceClient):
                        try:
                            table_client = client.create_table_if_not_exists(table_name)
                        except ResourceExistsError:
                            table_client = client.get_table_client(table_name)
                        return table_client

                    cls._instance = super().__new__(cls)
                    # シングルトンの初期化
                    cls._instance.client = get_client()
                    cls._instance.products_table = get_table_client(
                        os.getenv("AZURE_PRODUCTS_TABLE_NAME", "products"), cls._instance.client)

        return cls._instance

    def __init__(self):
        pass
