import logging
import math
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from shortlinks import schemas, validators
from shortlinks.config import Settings
from shortlinks.database import init_db, make_engine
from shortlinks.errors import NotFound, ShortenerError, StorageError, ValidationError
from shortlinks.store import AliasStore

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

# OFFSET is bound as a signed 64-bit integer by the drivers
MAX_OFFSET = 2 ** 63 - 1

logger = logging.getLogger("shortlinks")

router = APIRouter()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def get_store(request: Request) -> AliasStore:
    return request.app.state.store


def public_base_url(request: Request) -> str:
    return request.app.state.settings.public_base_url or str(request.base_url).rstrip("/")


def record_click(store: AliasStore, code: str) -> None:
    # runs after the redirect is sent; a failed count must never reach the visitor
    try:
        store.increment_click(code)
    except Exception:
        logger.exception("Failed to increment click for %s", code)


# Health check (useful for uptime monitors & load balancers)
@router.get("/health")
def health(request: Request, store: AliasStore = Depends(get_store)):
    database = store.health_check()
    if database["status"] != "healthy":
        return JSONResponse(
            status_code=500,
            content={"error": "Health check failed", "database": {"status": "unhealthy"}},
        )
    return {
        "success": True,
        "database": database,
        "server": {
            "status": "healthy",
            "uptime": time.monotonic() - request.app.state.started_at,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


@router.post("/shorten", status_code=201, response_model=schemas.ShortenResponse)
def shorten_url(payload: schemas.ShortenIn, request: Request, store: AliasStore = Depends(get_store)):
    long_url = validators.validate_long_url(payload.long_url)
    link = store.create(long_url)
    return schemas.ShortenResponse(
        data=schemas.ShortenedOut(
            id=link.id,
            long_url=link.long_url,
            short_code=link.short_code,
            full_short_url=f"{public_base_url(request)}/{link.short_code}",
            click_count=link.click_count,
            created_at=link.created_at,
        )
    )


@router.get("/urls", response_model=schemas.PaginatedAliases)
def list_urls(
    page: int = Query(1),
    limit: int = Query(10),
    store: AliasStore = Depends(get_store),
):
    if page < 1 or limit < 1 or limit > 100:
        raise ValidationError(
            "Invalid pagination parameters. Page must be >= 1, limit must be between 1 and 100"
        )
    offset = (page - 1) * limit
    if offset > MAX_OFFSET:
        raise ValidationError("Invalid pagination parameters. Page is too large")
    items, total = store.list(limit=limit, offset=offset)
    total_pages = math.ceil(total / limit)
    return schemas.PaginatedAliases(
        data=[schemas.AliasOut.model_validate(item) for item in items],
        pagination=schemas.Pagination(
            current_page=page,
            total_pages=total_pages,
            total_count=total,
            limit=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        ),
    )


@router.get("/info/{short_code}", response_model=schemas.AliasResponse)
def url_info(short_code: str, store: AliasStore = Depends(get_store)):
    validators.validate_short_code(short_code)
    link = store.find_by_short_code(short_code)
    if not link:
        raise NotFound("Short URL not found")
    return schemas.AliasResponse(data=schemas.AliasOut.model_validate(link))


# Registered last so the fixed paths above win
@router.get("/{short_code}", include_in_schema=False)
def redirect_url(short_code: str, background_tasks: BackgroundTasks, store: AliasStore = Depends(get_store)):
    validators.validate_short_code(short_code)
    link = store.find_by_short_code(short_code)
    if not link:
        raise NotFound("Short URL not found")
    background_tasks.add_task(record_click, store, short_code)
    return RedirectResponse(url=link.long_url, status_code=301)


async def handle_shortener_error(request: Request, exc: ShortenerError):
    if isinstance(exc, StorageError):
        # cause already logged by the store
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})


def create_app(settings: Settings | None = None, store: AliasStore | None = None) -> FastAPI:
    """Build the service.

    The store is opened when the app starts and closed when it stops. A store
    passed in by the caller is used as is and left open for the caller to close.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or AliasStore(make_engine(settings))
        init_db(app.state.store.engine)
        app.state.started_at = time.monotonic()
        logger.info("Shortlinks started (env=%s)", settings.environment)
        yield
        if store is None:
            app.state.store.close()

    app = FastAPI(
        title="Shortlinks",
        description="Shorten long URLs into base-62 aliases and track their clicks.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # --- CORS (allow frontend dev servers, etc.) ---
    origins = [settings.public_base_url or "http://localhost:8000"] if settings.is_prod else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShortenerError, handle_shortener_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.include_router(router)
    return app
