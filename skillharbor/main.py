from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from skillharbor.core import config
from skillharbor.core.database.engine import init_db
from skillharbor.core.errors import register_exception_handlers
from skillharbor.core.rate_limit import limiter
from skillharbor.features.auth.routes import router as auth_router
from skillharbor.features.permissions.routes import router as permission_router
from skillharbor.features.users.routes import router as user_router
from skillharbor.utils import get_logger


VERSION = "0.1.0"

log = get_logger(__name__)
log.info("Starting SkillHarbor API")
app = FastAPI(
    title="SkillHarbor Backend",
    description="Skills management API with role-based access control",
    version=VERSION,
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
# slowapi finds the limiter through app.state
app.state.limiter = limiter
register_exception_handlers(app)


class RouteTimings(TimingClient):
    """Logs per-route latency at debug level."""

    def timing(self, metric_name, timing, tags):
        route = metric_name.removeprefix("api.skillharbor.features.")
        log.debug(f"{route} took {timing * 1000:.1f}ms {tags}")


app.add_middleware(TimingMiddleware, client=RouteTimings(), metric_namer=StarletteScopeToName("api", app))

if config.ENABLE_DOCS:
    log.warning("API docs are enabled")
if config.ALLOW_ORIGIN:
    log.warning(f"CORS: allowing origin {config.ALLOW_ORIGIN}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.ALLOW_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
async def create_tables():
    await init_db()
    log.info(f"Database ready at {config.SQLALCHEMY_DATABASE_URL.split('://', 1)[0]}")


@app.get("/")
async def root():
    """Service banner with pointers for API clients."""
    return {
        "message": "SkillHarbor Backend API",
        "version": VERSION,
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "login": "/auth/login",
            "scheme": "Bearer token in the Authorization header",
            "protected_endpoints": ["/auth/me", "/auth/logout", "/permissions/*", "/users/*"],
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])
app.include_router(user_router, prefix="/users", tags=["users"])
