from __future__ import annotations
import logging
from fastapi import FastAPI
from .config import settings
from .routers import convert

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="EPD Raster")

app.include_router(convert.router)


@app.get("/")
async def root():
    return {"ok": True, "service": "epd-raster"}
