"""
    QR Inventory Service API

    This module implements a FastAPI-based microservice for managing inventory
    items keyed by a unique QR code, with PostgreSQL persistence.

    Endpoints:
        GET /items: List all items
        GET /items/{code}: Get a single item by QR code
        POST /items: Create an item, generating a unique code when needed
        PUT /items/{code}: Update any subset of an item's mutable fields
        PATCH /items/{code}/quantity: Update only an item's quantity
        DELETE /items/{code}: Delete an item (idempotent)
        GET /healthz: Health check endpoint for orchestration systems

    Every error response is JSON with a ``message`` field.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, config, crud, schemas, service
from .codes import CodeResolver
from .database import close_db, get_db, init_db
from .errors import InventoryError, ItemNotFoundError
from .logging_config import setup_logging
from .middleware import BodySizeLimitMiddleware

logger = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> config.Settings:
    return request.app.state.settings


def get_resolver(
    db: Session = Depends(get_db),
    settings: config.Settings = Depends(get_settings),
) -> CodeResolver:
    """Dependency providing a code resolver bound to the request's session."""
    return service.make_resolver(db, max_attempts=settings.code_max_attempts)


@router.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the inventory service.

    Returns:
        dict: ``{"status": "healthy"}`` while the process is serving requests.
    """
    return {"status": "healthy"}


@router.get("/items", response_model=List[schemas.InventoryItem])
def list_inventory_items(db: Session = Depends(get_db)):
    """
    List all inventory items.

    Returns:
        List of inventory item objects, possibly empty
    """
    return crud.get_inventory_items(db)


@router.get("/items/{code}", response_model=schemas.InventoryItem)
def get_inventory_item(code: str, db: Session = Depends(get_db)):
    """
    Get a single inventory item by QR code.

    Raises:
        ItemNotFoundError: 404 if no item has this code
    """
    db_item = crud.get_inventory_item_by_code(db, code)
    if db_item is None:
        raise ItemNotFoundError()
    return db_item


@router.post("/items", response_model=schemas.InventoryItem)
def create_inventory_item(
    item: schemas.InventoryItemCreate,
    db: Session = Depends(get_db),
    resolver: CodeResolver = Depends(get_resolver),
    settings: config.Settings = Depends(get_settings),
):
    """
    Create a new inventory item.

    A missing, blank or already-used code is replaced by a generated one;
    the stored item is returned with the code it was saved under.

    Raises:
        CodeResolutionExhaustedError: 500 if no unique code could be assigned
    """
    logger.info(f"Creating item '{item.name}' (requested code: {item.code!r})")
    return service.create_item(db, item, resolver, max_insert_attempts=settings.insert_max_attempts)


@router.put("/items/{code}", response_model=schemas.InventoryItem)
def update_inventory_item(code: str, item: schemas.InventoryItemUpdate, db: Session = Depends(get_db)):
    """
    Update an existing inventory item.

    Only the fields present in the body are changed; the code is immutable.

    Raises:
        ItemNotFoundError: 404 if no item has this code
    """
    db_item = crud.update_inventory_item(db, code, item)
    if db_item is None:
        raise ItemNotFoundError()
    return db_item


@router.patch("/items/{code}/quantity", response_model=schemas.InventoryItem)
def update_inventory_quantity(code: str, body: schemas.InventoryQuantityUpdate, db: Session = Depends(get_db)):
    """
    Set only the quantity of an existing inventory item.

    Raises:
        ItemNotFoundError: 404 if no item has this code
    """
    db_item = crud.update_inventory_quantity(db, code, body.quantity)
    if db_item is None:
        raise ItemNotFoundError()
    return db_item


@router.delete("/items/{code}", response_model=schemas.Message)
def delete_inventory_item(code: str, db: Session = Depends(get_db)):
    """Delete an inventory item. Deleting an unknown code also succeeds."""
    crud.delete_inventory_item(db, code)
    return {"message": "Item deleted"}


class FrontendFiles(StaticFiles):
    """Static files that fall back to ``index.html`` for unknown paths."""

    async def get_response(self, path, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


def _validation_message(errors: list) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first['msg']}" if field else first["msg"]


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as JSON with a ``message`` field."""

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        return JSONResponse(
            status_code=400,
            content={"message": _validation_message(errors), "errors": jsonable_encoder(errors)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"{request.method} {request.url.path} database error: {exc}")
        return JSONResponse(status_code=500, content={"message": "Server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} unexpected error")
        return JSONResponse(status_code=500, content={"message": "Server error"})


def create_app(settings: Optional[config.Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    The connection pool is created when the application starts and disposed
    when it shuts down.

    Args:
        settings: Settings to use; the environment-derived ``config.settings`` by default

    Returns:
        FastAPI: A configured application instance
    """
    settings = settings or config.settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(app, settings)
        yield
        close_db(app)

    app = FastAPI(title=settings.project_name, version=__version__, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)

    if settings.frontend_dir:
        frontend = Path(settings.frontend_dir)
        if frontend.is_dir():
            app.mount("/", FrontendFiles(directory=frontend, html=True), name="frontend")
        else:
            logger.warning(f"FRONTEND_DIR {frontend} is not a directory, static files disabled")

    return app


# Application instance for ASGI servers, e.g. ``uvicorn qr_inventory.main:app``
app = create_app()
