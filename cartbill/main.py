# cartbill/main.py
import logging

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import configure_logging, load_settings
from .core import BillRequest, ProductIn, ProductUpdate
from .database import DocumentStore, get_store
from .invoice import XLSX_MIME
from .logic import (
    list_products_logic, get_product_logic, create_product_logic,
    update_product_logic, delete_product_logic, download_bill_logic
)

logger = logging.getLogger(__name__)
settings = load_settings()

app = FastAPI(title="cartbill")

# ---------------------------
# Error envelope: {"error": <message>}
# ---------------------------
@app.exception_handler(StarletteHTTPException)
async def http_error(request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_error(request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return JSONResponse({"error": message}, status_code=400)

# ---------------------------
# Health
# ---------------------------
@app.get("/", response_class=PlainTextResponse)
async def health():
    return "API running"

# ---------------------------
# Product endpoints
# ---------------------------
@app.get("/products")
async def list_products(store: DocumentStore = Depends(get_store)):
    return await list_products_logic(store)

@app.get("/products/{product_id}")
async def get_product(product_id: str, store: DocumentStore = Depends(get_store)):
    return await get_product_logic(store, product_id)

@app.post("/products", status_code=201)
async def create_product(payload: ProductIn, store: DocumentStore = Depends(get_store)):
    return await create_product_logic(store, payload)

@app.put("/products/{product_id}")
async def update_product(product_id: str, payload: ProductUpdate, store: DocumentStore = Depends(get_store)):
    return await update_product_logic(store, product_id, payload)

@app.delete("/products/{product_id}")
async def delete_product(product_id: str, store: DocumentStore = Depends(get_store)):
    return await delete_product_logic(store, product_id)

# ---------------------------
# Bill download
# ---------------------------
@app.post("/bill/download")
async def download_bill(payload: BillRequest, store: DocumentStore = Depends(get_store)):
    headers, content = await download_bill_logic(store, payload)
    return Response(content=content, media_type=XLSX_MIME, headers=headers)

# ---------------------------
# Served app: routes mounted under API_PREFIX, CORS on the outermost app only
# ---------------------------
if settings.api_prefix:
    server_app = FastAPI(title="cartbill server")
    server_app.mount(settings.api_prefix, app)
else:
    server_app = app

server_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def run():
    cfg = load_settings()
    configure_logging(cfg.log_level)
    get_store()
    logger.info("Server listening on port %d", cfg.port)
    uvicorn.run(server_app, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    run()
