# marketpay/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from marketpay.utils.settings import get_settings
from marketpay.utils.logging import configure_logging, get_logger
from marketpay.data.database import Base, engine
from marketpay.api import ROUTERS
from marketpay.api.errors import register_error_handlers

# import modeli przed create_all
import marketpay.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info("Initializing database", tables=sorted(Base.metadata.tables.keys()))
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise


def create_app() -> FastAPI:
    # brak sekretow -> ConfigurationError, serwis nie wstaje
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)

    init_db()

    app = FastAPI(
        title="Marketplace Payments",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Stripe-Signature"],
        max_age=3600,
    )

    register_error_handlers(app)

    for router in ROUTERS:
        app.include_router(router)

    logger.info("Marketplace payments API ready", gateway=settings.payment_gateway)
    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
