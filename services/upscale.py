from typing import Callable, Optional, List
from models.product import Product
from models.upscale import Prediction, UpscaleState, UpscaleResult, REAL_ESRGAN_VERSION
from models.errors import UpscaleError, UpscaleFailedError, UpscaleTimeoutError
from managers.replicate_manager import ReplicateManager
from managers.blob_manager import BLOBConnectionManager
from repository import product as product_repo
import requests
import time
import os
import logging

logger = logging.getLogger(__name__)

_STATE_BY_STATUS = {
    "starting": UpscaleState.SUBMITTED,
    "processing": UpscaleState.POLLING,
    "succeeded": UpscaleState.SUCCEEDED,
    "failed": UpscaleState.FAILED,
    "canceled": UpscaleState.CANCELED,
}


def upscaled_blob_name(product_id: str) -> str:
    return f"upscaled/{product_id}.png"


class UpscaleOrchestrator:
    """
    画像アップスケールジョブを投入し、完了までポーリングして結果をBLOBへ保存する

    ポーリングは max_polls 回と deadline_seconds の早い方で打ち切られ、
    打ち切り・失敗時は商品レコードを変更しない。
    """

    def __init__(
        self,
        client: Optional[ReplicateManager] = None,
        blob_manager: Optional[BLOBConnectionManager] = None,
        poll_interval: Optional[float] = None,
        max_polls: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client or ReplicateManager()
        self.blob_manager = blob_manager
        self.poll_interval = poll_interval if poll_interval is not None else float(os.getenv("UPSCALE_POLL_INTERVAL", "1.0"))
        self.max_polls = max_polls if max_polls is not None else int(os.getenv("UPSCALE_MAX_POLLS", "200"))
        self.deadline_seconds = deadline_seconds if deadline_seconds is not None else float(os.getenv("UPSCALE_TIMEOUT_SECONDS", "240"))
        self.sleep = sleep
        self.clock = clock
        self.state: Optional[UpscaleState] = None
        self.history: List[UpscaleState] = []

    def _transition(self, state: UpscaleState, product_id: str):
        if state != self.state:
            logger.info("Upscale %s: %s -> %s", product_id, self.state.value if self.state else None, state.value)
            self.state = state
            self.history.append(state)

    def poll(self, product: Product) -> tuple:
        """ジョブを投入し、終端状態までポーリングする。(prediction, polls)を返す"""
        started = self.clock()
        try:
            prediction = self.client.create_prediction(product.image, REAL_ESRGAN_VERSION)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise UpscaleError(f"Failed to submit upscale job for {product.id}: {e}")
        self._transition(UpscaleState.SUBMITTED, product.id)

        polls = 0
        while prediction.status not in ("succeeded", "failed", "canceled"):
            if polls >= self.max_polls or self.clock() - started + self.poll_interval > self.deadline_seconds:
                self._transition(UpscaleState.TIMED_OUT, product.id)
                raise UpscaleTimeoutError(
                    f"Upscale job {prediction.id} for {product.id} did not finish after {polls} polls")
            self._transition(UpscaleState.POLLING, product.id)
            self.sleep(self.poll_interval)
            try:
                prediction = self.client.get_prediction(prediction.id)
            except (requests.exceptions.RequestException, ValueError) as e:
                raise UpscaleError(f"Failed to poll upscale job {prediction.id}: {e}")
            polls += 1

        self._transition(_STATE_BY_STATUS[prediction.status], product.id)
        if prediction.status != "succeeded":
            message = f"Upscale job {prediction.id} for {product.id} {prediction.status}"
            if prediction.error:
                message += f": {prediction.error}"
            raise UpscaleFailedError(message)
        if not prediction.output_url():
            raise UpscaleError(f"Upscale job {prediction.id} succeeded without output")
        return prediction, polls

    def store(self, product: Product, prediction: Prediction) -> str:
        """出力画像を商品IDから決まるパスへ上書き保存し、読み取りURLを返す"""
        output_url = prediction.output_url()
        try:
            data, content_type = self.client.download(output_url)
        except requests.exceptions.RequestException as e:
            raise UpscaleError(f"Failed to download upscaled image {output_url}: {e}")

        # 再実行時も同じBLOBを上書きするようパスは商品IDのみから決める
        blob_name = upscaled_blob_name(product.id)

        blob_manager = self.blob_manager or BLOBConnectionManager()
        blob_manager.upload_bytes(blob_name, data, content_type)
        return blob_manager.generate_sas_url(blob_name)

    def run(self, product: Product) -> UpscaleResult:
        prediction, polls = self.poll(product)
        upscaled_image = self.store(product, prediction)
        product_repo.update_product_fields(product.id, {"upscaled_image": upscaled_image})
        logger.info("Upscaled image stored for product %s", product.id)
        return UpscaleResult(product_id=product.id, prediction_id=prediction.id, state=self.state,
                             polls=polls, upscaled_image=upscaled_image)


def upscale_product(product_id: str) -> Optional[UpscaleResult]:
    product = product_repo.get_product(product_id)
    if product.upscaled_image:
        logger.info("Product %s already upscaled, skipping", product_id)
        return None
    return UpscaleOrchestrator().run(product)
