from typing import Optional, Dict
from threading import Lock
from azure.storage.queue import QueueClient, TextBase64EncodePolicy, TextBase64DecodePolicy
import os


class QueueConnectionManager:
    _instance: Optional['QueueConnectionManager'] = None
    _lock = Lock()
    queues: Dict[str, QueueClient] = {}

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance.queues = {}
        return cls._instance

    def __init__(self):
        pass

    def get_queue(self, queue_name: str) -> QueueClient:
        """キュークライアントを取得する（Functionsのキュートリガーはbase64メッセージを前提とする）"""
        if queue_name not in self.queues:
            with self._lock:
                if queue_name not in self.queues:
                    self.queues[queue_name] = QueueClient.from_connection_string(
                        os.getenv("AZURE_STORAGE_CONNECTION_STRING"),
                        queue_name,
                        message_encode_policy=TextBase64EncodePolicy(),
                        message_decode_policy=TextBase64DecodePolicy(),
                    )
        return self.queues[queue_name]

    def send(self, queue_name: str, message: str):
        return self.get_queue(queue_name).send_message(message)
