"""FastAPI catalog service backed by a JSON file.

Serves the same endpoints the storefront calls in production, for local
development and end-to-end tests. Run with
``uvicorn storefront.server:app --port 8082 --root-path /api/v1`` or mount
under any prefix; the client only needs the base URL.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import configure_logging, settings
from .errors import GENERIC_SERVER_MESSAGE
from .models import ErrorPayload, Product, parse_products
from .text import normalize_query

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "No products found"


class Catalog:
    def __init__(self, products: List[Product]) -> None:
        self.products = list(products)

    @classmethod
    def from_file(cls, path: str | Path) -> "Catalog":
        file_path = Path(path)
        if not file_path.exists():
            logger.warning("Products file %s is missing; serving an empty catalog", file_path)
            return cls([])
        with file_path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
        try:
            products = parse_products(raw)
        except ValidationError:
            logger.exception("Products file %s does not hold a product list", file_path)
            raise
        logger.info("Loaded %s products from %s", len(products), file_path)
        return cls(products)

    def search(self, value: str) -> List[Product]:
        needle = normalize_query(value)
        if not needle:
            return list(self.products)
        return [
            product
            for product in self.products
            if needle in normalize_query(product.name) or needle in normalize_query(product.category)
        ]


def create_app(catalog: Catalog | None = None) -> FastAPI:
    app = FastAPI(title="Storefront Catalog Service")
    app.state.catalog = catalog if catalog is not None else Catalog.from_file(settings.products_path)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        payload = ErrorPayload(message=str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=payload.model_dump())

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error serving %s", request.url.path)
        payload = ErrorPayload(message=GENERIC_SERVER_MESSAGE)
        return JSONResponse(status_code=500, content=payload.model_dump())

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "products": len(app.state.catalog.products)}

    @app.get("/products", response_model=List[Product])
    async def list_products() -> List[Product]:
        return app.state.catalog.products

    @app.get("/products/search", response_model=List[Product])
    async def search_products(value: str = Query("", description="Text to match against name or category")) -> List[Product]:
        matches = app.state.catalog.search(value)
        logger.info("search value=%r hits=%s", value, len(matches))
        if not matches and value:
            raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
        return matches

    return app


configure_logging()
app = create_app()
