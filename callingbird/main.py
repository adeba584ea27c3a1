import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_billing,  # noqa: F401
    models_integrations,  # noqa: F401
)
from .config import ALLOWED_ORIGINS
from .crypto import check_master_key
from .database import Base, engine
from .domain.admin.router import router as admin_router
from .domain.billing.router import router as billing_router
from .domain.calendar.router import google_router, outlook_router
from .domain.commerce.router import shopify_router, woocommerce_router
from .domain.company.router import auth_router
from .domain.company.router import router as company_router
from .domain.early_access.router import router as early_access_router
from .domain.instructions.router import router as instructions_router
from .domain.integrations.router import router as integrations_router
from .domain.products.router import router as products_router
from .domain.scheduling.router import router as scheduling_router
from .domain.voice.router import router as voice_router
from .errors import (
    AmbiguousProductMatchError,
    AssistantSyncError,
    CalendarReauthRequiredError,
    ConfigurationError,
    NoProductMatchError,
    SecretDecryptionError,
    UpstreamRequestError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    try:
        check_master_key()
    except ConfigurationError as e:
        logger.error(f"❌ Credential encryption unavailable, integrations will fail: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="CallingBird API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic puts the raised ValueError in ctx, which is not JSON serializable
    return [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]


@app.exception_handler(AssistantSyncError)
async def assistant_sync_exception_handler(request: Request, exc: AssistantSyncError):
    logger.error(f"❌ Assistant sync failed for {request.url.path}: {exc.messages}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.messages[0], "messages": exc.messages},
    )


@app.exception_handler(NoProductMatchError)
async def no_product_match_handler(request: Request, exc: NoProductMatchError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(AmbiguousProductMatchError)
async def ambiguous_product_match_handler(request: Request, exc: AmbiguousProductMatchError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "candidates": exc.candidates})


@app.exception_handler(CalendarReauthRequiredError)
async def calendar_reauth_handler(request: Request, exc: CalendarReauthRequiredError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "provider": exc.provider, "authorizationUrl": exc.auth_url},
    )


@app.exception_handler(UpstreamRequestError)
async def upstream_exception_handler(request: Request, exc: UpstreamRequestError):
    logger.error(f"❌ {exc.service} error for {request.url.path}: {exc.messages}")
    return JSONResponse(status_code=502, content={"detail": f"{exc.service} request failed", "messages": exc.messages})


@app.exception_handler(httpx.HTTPStatusError)
async def http_status_exception_handler(request: Request, exc: httpx.HTTPStatusError):
    logger.error(f"❌ Upstream {exc.response.status_code} from {exc.request.url.host} for {request.url.path}")
    return JSONResponse(status_code=502, content={"detail": "Upstream service request failed"})


@app.exception_handler(SecretDecryptionError)
async def secret_decryption_handler(request: Request, exc: SecretDecryptionError):
    return JSONResponse(status_code=500, content={"detail": "Stored credentials are unreadable, reconnect the integration"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(company_router)
app.include_router(billing_router)
app.include_router(admin_router)
app.include_router(scheduling_router)
app.include_router(voice_router)
app.include_router(instructions_router)
app.include_router(products_router)
app.include_router(integrations_router)
app.include_router(google_router)
app.include_router(outlook_router)
app.include_router(shopify_router)
app.include_router(woocommerce_router)
app.include_router(early_access_router)


@app.get("/")
def root():
    return {"message": "CallingBird API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
