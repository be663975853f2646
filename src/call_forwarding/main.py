from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from call_forwarding.config import get_client_base_url
from call_forwarding.forwarding.dependencies import get_forwarding_sessions
from call_forwarding.forwarding.router import router as forwarding_router
from call_forwarding.utils.logger import logger


def get_version() -> str:
    """Get the installed package version."""
    try:
        return version("call-forwarding")
    except PackageNotFoundError:
        # Running from a source checkout without an install
        return "0.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Call forwarding API starting", version=app.version)
    yield
    await get_forwarding_sessions().close_all()
    logger.info("Call forwarding sessions closed")


app = FastAPI(
    title="Call Forwarding API",
    description="Carrier dial codes and forwarding confirmation for the dashboard",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_client_base_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(forwarding_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "Call forwarding API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "Call forwarding API is running"}
