# backend/main.py
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from config import Settings
from database import build_engine, build_session_factory, init_db
from utils.errors import AppError, StorageError, ValidationError
from utils.image_storage import CloudinaryUploader

# Router imports
from routes.auth import router as auth_router
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.protected import router as protected_router
from routes.logs import router as logs_router

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return errors


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": _field_errors(exc)})

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        content = {"detail": exc.message}
        if isinstance(exc, ValidationError):
            content["errors"] = exc.errors
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(OverflowError)
    async def overflow_handler(request: Request, exc: OverflowError):
        # Integers past what the database driver can bind
        error = ValidationError("Numeric value out of range")
        return JSONResponse(status_code=error.status_code, content={"detail": error.message, "errors": error.errors})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        # Full detail goes to the log only, never to the caller
        logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
        error = StorageError()
        return JSONResponse(status_code=error.status_code, content={"detail": error.message})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        load_dotenv()
        settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)

    app = FastAPI(title="Storefront API", version="1.0.0", docs_url="/api-docs")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.image_uploader = CloudinaryUploader(settings)

    # CORS Configuration
    origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    if settings.FRONTEND_URL:
        origins.append(settings.FRONTEND_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(protected_router)
    app.include_router(logs_router)

    @app.get("/")
    def read_root():
        return {"message": "Storefront API is running"}

    return app

