import logging

from fastapi import FastAPI

from .api import health, server
from .config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Server Health Dashboard")

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(server.router, prefix="/api", tags=["server"])
