from typing import Optional, Tuple
from models.upscale import Prediction, REAL_ESRGAN_VERSION
import requests
import os


class ReplicateManager:
    _instance: Optional['ReplicateManager'] = None
    session: Optional[requests.Session] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.session = requests.Session()
        return cls._instance

    def __init__(self):
        pass

    def _headers(self):
        return {
            "Authorization": f"Token {os.getenv('REPLICATE_API_TOKEN', '')}",
            "Content-Type": "application/json",
        }

    def _base_url(self) -> str:
        return os.getenv("REPLICATE_API_URL", "https://api.replicate.com/v1/predictions").rstrip("/")

    def create_prediction(self, image_url: str, version: str = REAL_ESRGAN_VERSION) -> Prediction:
        response = self.session.post(
            self._base_url(),
            json={"version": version, "input": {"image": image_url}},
            headers=self._headers(),
            timeout=30,
        )
        response.raise_for_status()
        return Prediction.model_validate(response.json())

    def get_prediction(self, prediction_id: str) -> Prediction:
        response = self.session.get(
            f"{self._base_url()}/{prediction_id}",
            headers=self._headers(),
            timeout=30,
        )
        response.raise_for_status()
        return Prediction.model_validate(response.json())

    def download(self, url: str) -> Tuple[bytes, Optional[str]]:
        """出力画像を取得する（本文とContent-Type）"""
        response = self.session.get(url, timeout=60)
        response.raise_for_status()
        return response.content, response.headers.get("Content-Type")
