import tomllib
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fusioncaller.admin.router import router as admin_router
from fusioncaller.config import get_app_settings
from fusioncaller.db.database import close_db
from fusioncaller.disputes.router import router as organizations_router
from fusioncaller.utils.logger import logger
from fusioncaller.utils.tasks import get_task_runner
from fusioncaller.webhook.router import router as webhook_router


def get_version() -> str:
    """Version from pyproject.toml in a checkout, else from the installed package."""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            return tomllib.load(f)["project"]["version"]
    except FileNotFoundError:
        try:
            return version("fusioncaller")
        except PackageNotFoundError:
            return "0.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("FusionCaller API starting", version=app.version)
    yield
    # Let in-flight notifications and charges finish before the pool goes away
    await get_task_runner().drain()
    await close_db()
    logger.info("FusionCaller API stopped")


settings = get_app_settings()

app = FastAPI(
    title="FusionCaller API",
    description="Call ingestion, usage billing and lead notifications",
    version=get_version(),
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook_router, prefix="/api")
app.include_router(organizations_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/")
async def root():
    return {"status": "ok", "service": "fusioncaller", "version": app.version}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "FusionCaller API is running"}
