# cartbill/config.py
import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

# .env is for local development only
if os.getenv("APP_ENV") != "production":
    load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SHOP_NAME = "Construction Cart"
DEFAULT_CURRENCY_SYMBOL = "₹"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    shop_name: str = DEFAULT_SHOP_NAME
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    api_prefix: str = "/api"
    store_backend: str = "memory"
    firebase_config: Optional[str] = None
    products_collection: str = "products"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _parse_port(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid PORT %r, using %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT


def load_settings() -> Settings:
    """Read settings from the environment. Called per use so env changes apply."""
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    return Settings(
        shop_name=os.getenv("SHOP_NAME") or DEFAULT_SHOP_NAME,
        currency_symbol=os.getenv("CURRENCY_SYMBOL") or DEFAULT_CURRENCY_SYMBOL,
        host=os.getenv("HOST", "0.0.0.0"),
        port=_parse_port(os.getenv("PORT")),
        api_prefix=os.getenv("API_PREFIX", "/api").rstrip("/"),
        store_backend=os.getenv("STORE_BACKEND", "memory").lower(),
        firebase_config=os.getenv("FIREBASE_CONFIG") or None,
        products_collection=os.getenv("PRODUCTS_COLLECTION", "products"),
        cors_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
