import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.analytics.document_store import DocumentStore
from storefront.api.routes import analytics, cart, collections, notifications, policies, products, search, sizing
from storefront.core.config import get_settings
from storefront.core.errors import ApiError
from storefront.db.base import Base
from storefront.db.session import engine
from storefront.matching.config import load_similar_products_config
from storefront.platform import StorefrontClient, StorefrontError, StorefrontUserError

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    Base.metadata.create_all(bind=engine)
    app.state.storefront = StorefrontClient(settings)
    app.state.similar_products_config = load_similar_products_config()
    app.state.analytics_enabled = settings.analytics_enabled
    app.state.event_store = DocumentStore(settings) if settings.analytics_data_api_url else None
    if settings.analytics_enabled and app.state.event_store is None:
        logger.warning("Analytics is enabled but no data API URL is configured")
    logger.info("Similar products config: %s", app.state.similar_products_config)


@app.on_event("shutdown")
async def shutdown() -> None:
    await app.state.storefront.aclose()
    if app.state.event_store is not None:
        await app.state.event_store.aclose()


@app.exception_handler(RequestValidationError)
def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"code": "validation_error", "message": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StorefrontUserError)
def storefront_user_error_handler(_: Request, exc: StorefrontUserError) -> JSONResponse:
    error = ApiError(code="cart_error", message=str(exc), details={"errors": exc.errors})
    return JSONResponse(status_code=400, content={"detail": error.as_detail()})


@app.exception_handler(StorefrontError)
def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.warning("Storefront API failure on %s: %s", request.url.path, exc)
    error = ApiError(code="upstream_error", message="Storefront API request failed")
    return JSONResponse(status_code=502, content={"detail": error.as_detail()})


app.include_router(products.router)
app.include_router(collections.router)
app.include_router(search.router)
app.include_router(policies.router)
app.include_router(cart.router)
app.include_router(sizing.router)
app.include_router(analytics.router)
app.include_router(notifications.router)
app.include_router(notifications.admin_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
