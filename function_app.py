import azure.functions as func
import logging
from api import app as fastapi_app
from services.events import handle_product_created_checkout, handle_product_created_upscale

app = func.AsgiFunctionApp(app=fastapi_app, http_auth_level=func.AuthLevel.ANONYMOUS)


@app.queue_trigger(arg_name="msg", queue_name="%PRODUCT_CHECKOUT_QUEUE_NAME%", connection="AZURE_STORAGE_CONNECTION_STRING")
def product_created_checkout(msg: func.QueueMessage):
    body = msg.get_body().decode("utf-8")
    logging.info("product-created (checkout): %s", body)
    handle_product_created_checkout(body)


@app.queue_trigger(arg_name="msg", queue_name="%PRODUCT_UPSCALE_QUEUE_NAME%", connection="AZURE_STORAGE_CONNECTION_STRING")
def product_created_upscale(msg: func.QueueMessage):
    body = msg.get_body().decode("utf-8")
    logging.info("product-created (upscale): %s", body)
    handle_product_created_upscale(body)
