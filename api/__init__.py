import fastapi
import logging
from . import connection, products, webhooks

logging.basicConfig(level=logging.INFO)

app = fastapi.FastAPI()

app.include_router(connection.router)
app.include_router(products.router)
app.include_router(webhooks.router)
