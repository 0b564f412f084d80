from pydantic import BaseModel
from typing import List, Optional, Literal, Union
from enum import Enum

# nightmareai/real-esrgan
REAL_ESRGAN_VERSION = "42fed1c4974146d4d2414e2be2c5277c7fcf05fcc3a73abf41610695738c1d7b"

PredictionStatus = Literal['starting', 'processing', 'succeeded', 'failed', 'canceled']


class UpscaleState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    TIMED_OUT = "timed_out"


class Prediction(BaseModel):
    id: str
    status: PredictionStatus
    output: Optional[Union[str, List[str]]] = None
    error: Optional[str] = None

    def is_terminal(self) -> bool:
        return self.status in ('succeeded', 'failed', 'canceled')

    def output_url(self) -> Optional[str]:
        if isinstance(self.output, list):
            return self.output[0] if self.output else None
        return self.output


class UpscaleResult(BaseModel):
    product_id: str
    prediction_id: str
    state: UpscaleState
    polls: int
    upscaled_image: str
