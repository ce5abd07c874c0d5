# storefront/main.py
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import settings
from .db import Base, engine
from .errors import install_error_handlers
from .routes import admin, auth, cart, orders, products
from .storage import uploads_dir

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(
    title="Storefront API",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
    openapi_url=None if settings.is_production else "/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

install_error_handlers(app)

Base.metadata.create_all(bind=engine)
log.info("database ready (%s)", engine.url.render_as_string(hide_password=True))

app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(products.router)
app.include_router(cart.router)
app.include_router(orders.router)

app.mount("/uploads", StaticFiles(directory=str(uploads_dir())), name="uploads")


# -------------------
# Health
# -------------------
@app.get("/health")
def health():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
