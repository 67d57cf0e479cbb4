import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)
from fastapi.middleware.cors import CORSMiddleware

from chest_api.core.config import settings
from chest_api.core.db import init_db
from chest_api.core.errors import LedgerError
from chest_api.core.scheduler import start_scheduler, stop_scheduler
from chest_api.routers import auth, chests, imports, items, logs


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events"""
    # Startup
    if settings.CREATE_TABLES:
        init_db()
        logger.info("[DB] Tables created")

    if settings.ENABLE_SCHEDULER:
        start_scheduler()

    yield

    # Shutdown
    if settings.ENABLE_SCHEDULER:
        stop_scheduler()


app = FastAPI(
    title="Chest Ledger API",
    version="0.1",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
)

# CORS middleware for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health", tags=["system"])
def health():
    return {"ok": True}


@app.get("/api/health", tags=["system"])
def api_health():
    return {"ok": True, "api": True}


@app.get("/", tags=["system"])
def root():
    return {"service": "chest-ledger-api"}


# Same routes at the root and under /api (web client and bot use both)
for module in (auth, chests, items, logs, imports):
    app.include_router(module.router)
    app.include_router(module.router, prefix="/api")
