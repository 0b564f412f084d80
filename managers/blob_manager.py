from typing import Optional
from azure.storage.blob import BlobServiceClient, ContentSettings, generate_blob_sas, BlobSasPermissions
import os
import datetime


class BLOBConnectionManager:
    _instance: Optional['BLOBConnectionManager'] = None
    client: Optional['BlobServiceClient'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls.client = BlobServiceClient.from_connection_string(os.getenv("AZURE_STORAGE_CONNECTION_STRING"))

        return cls._instance

    def __init__(self):
        pass

    def upload_bytes(self, blob_name: str, data: bytes, content_type: Optional[str] = None) -> str:
        """BLOBへ上書きアップロードし、BLOBのURLを返す"""
        blob_client = self.client.get_blob_client(
            container=os.getenv("AZURE_BLOB_UPSCALED_CONTAINER_NAME", "upscaled"),
            blob=blob_name,
        )
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        blob_client.upload_blob(data, overwrite=True, content_settings=content_settings)
        return blob_client.url

    def generate_sas_url(self, blob_name: str):
        """Azure Blob Storage用の長期読み取りSAS URLを生成する"""
        try:
            conn_str = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
            result = {}
            for pair in conn_str.split(";"):
                if not pair:
                    continue
                key, value = pair.split('=', 1)
                result[key] = value
            container_name = os.getenv("AZURE_BLOB_UPSCALED_CONTAINER_NAME", "upscaled")
            start_time = datetime.datetime.now(datetime.timezone.utc)
            expiry_time = start_time + datetime.timedelta(days=int(os.getenv("UPSCALED_SAS_EXPIRY_DAYS", "3650")))

            blob_client = self.client.get_blob_client(
                container=container_name,
                blob=blob_name,
            )

            sas_token = generate_blob_sas(
                account_name=result["AccountName"],
                container_name=container_name,
                blob_name=blob_name,
                account_key=result["AccountKey"],
                permission=BlobSasPermissions(read=True),
                expiry=expiry_time,
                start=start_time
            )

            sas_url = f"{blob_client.url}?{sas_token}"

            return sas_url

        except Exception as e:
            raise ValueError(f"SAS URL生成に失敗しました: {str(e)}")
