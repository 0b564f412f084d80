class ProductNotFoundError(ValueError):
    pass


class WebhookError(ValueError):
    """Webhook処理の失敗。messageはそのまま400レスポンスの本文になる"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response_text(self) -> str:
        return f"Webhook Error: {self.message}"


# 署名検証の失敗
class SignatureError(WebhookError):
    pass


class UnexpectedEventError(WebhookError):
    pass


class ProductReferenceError(WebhookError):
    pass


class ProductMissingError(WebhookError):
    pass


class CustomerDataError(WebhookError):
    pass


class FulfillmentError(WebhookError):
    pass


class UpscaleError(RuntimeError):
    pass


class UpscaleFailedError(UpscaleError):
    pass


class UpscaleTimeoutError(UpscaleError):
    pass
