# bakery_ledger/main.py
import logging
from contextlib import asynccontextmanager
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import core
from .config import Settings, settings as default_settings
from .database import LedgerDB
from .exceptions import InvalidOperation, LedgerError, NotFound
from .logging_config import setup_logging
from .models import MAX_PRODUCT_ID, Category, Product, ProductPayload, StockPayload

logger = logging.getLogger(__name__)

_STATUS = {NotFound: 404, InvalidOperation: 400}

ProductId = Annotated[int, Path(ge=0, le=MAX_PRODUCT_ID)]


def get_ledger(request: Request) -> LedgerDB:
    return request.app.state.ledger


async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(status_code=_STATUS.get(type(exc), 400), content=exc.to_tagged())


def create_app(settings: Optional[Settings] = None, ledger: Optional[LedgerDB] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_ledger:
            app.state.ledger.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    owns_ledger = ledger is None
    if owns_ledger:
        ledger = LedgerDB.open(settings.database_path)
    app.state.ledger = ledger
    app.add_exception_handler(LedgerError, ledger_error_handler)

    # ---------------------------
    # Query endpoints
    # ---------------------------
    @app.get("/products", response_model=List[Product])
    def list_all_products(db: LedgerDB = Depends(get_ledger)):
        return core.list_all_products(db)

    @app.get("/products/search", response_model=List[Product])
    def search_by_category(category: Category = Query(...), db: LedgerDB = Depends(get_ledger)):
        return core.search_by_category(db, category)

    @app.get("/products/{product_id}", response_model=Product)
    def get_product(product_id: ProductId, db: LedgerDB = Depends(get_ledger)):
        return core.get_product(db, product_id)

    @app.get("/products/{product_id}/stock")
    def get_stock(product_id: ProductId, db: LedgerDB = Depends(get_ledger)):
        return {"product_id": product_id, "quantity": core.get_stock(db, product_id)}

    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.post("/products", status_code=201, response_model=Product)
    def add_product(payload: ProductPayload, db: LedgerDB = Depends(get_ledger)):
        return core.add_product(db, payload)

    @app.put("/products/{product_id}", response_model=Product)
    def update_product(
        payload: ProductPayload, product_id: ProductId, db: LedgerDB = Depends(get_ledger)
    ):
        return core.update_product(db, product_id, payload)

    @app.delete("/products/{product_id}", response_model=Product)
    def remove_product(product_id: ProductId, db: LedgerDB = Depends(get_ledger)):
        return core.remove_product(db, product_id)

    # ---------------------------
    # Stock endpoints
    # ---------------------------
    @app.post("/products/{product_id}/stock/add", response_model=Product)
    def add_quantity(
        payload: StockPayload, product_id: ProductId, db: LedgerDB = Depends(get_ledger)
    ):
        return core.add_quantity(db, product_id, payload)

    @app.post("/products/{product_id}/stock/offload", response_model=Product)
    def offload_quantity(
        payload: StockPayload, product_id: ProductId, db: LedgerDB = Depends(get_ledger)
    ):
        return core.offload_quantity(db, product_id, payload)

    # ---------------------------
    # Utility: reset (for tests/demo)
    # ---------------------------
    @app.post("/reset")
    def clear_all_products(db: LedgerDB = Depends(get_ledger)):
        core.clear_all_products(db)
        return {"status": "cleared"}

    logger.info("Ledger service ready (database: %s)", settings.database_path)
    return app
