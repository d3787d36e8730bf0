"""
PharmaDist Backend: back office for a pharmaceutical distributor.

ARCHITECTURE:
- Shared medicine catalog, one definition per normalised name
- Per-account pricing layered over the catalog (overrides)
- Billing and purchase sessions persisted per account
- SQLite (or any SQLAlchemy URL) holding namespaced JSON documents

Accounts are identified by a header set by the upstream auth gateway.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmadist.api.deps import get_account
from pharmadist.api.routes import backup, billing, directory, inventory, notifications, purchases, reports
from pharmadist.core.config import settings
from pharmadist.db.init_db import init_db
from pharmadist.schemas.session import NavigateRequest
from pharmadist.services.account import AccountContext

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup. Seeding and migration run per account on first request."""
    logger.info("[*] Initializing database...")
    init_db()
    logger.info(f"[OK] Database ready ({settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title="PharmaDist API",
    description="Inventory, billing and purchases for a pharmaceutical distributor.",
    version="0.1.0",
    lifespan=lifespan,
)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
        settings.ACCOUNT_HEADER,
    ],
    max_age=600,  # Cache preflight for 10 minutes
    expose_headers=["Content-Type"],
)


# SECURITY: Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
app.include_router(billing.router, prefix="/billing", tags=["billing"])
app.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
app.include_router(directory.router, prefix="/directory", tags=["directory"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(backup.router, prefix="/backup", tags=["backup"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])


@app.post("/navigate", tags=["navigation"])
def navigate(data: NavigateRequest, account: AccountContext = Depends(get_account)):
    """The client switched screens. Edits tied to the previous screen may be dropped."""
    return account.change_view(data.view)


@app.get("/health")
def health():
    return {"status": "ok"}
