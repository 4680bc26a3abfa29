"""
POS Retail - Main FastAPI Application

Single entry point for the till front-end API.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Env must be loaded before pos_retail modules read their settings
load_dotenv(Path(__file__).parent.parent / ".env")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pos_retail.logging import get_logger
from pos_retail.routers import router as pos_router
from pos_retail.routers.deps import get_backend_lazy

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("POS API starting")
    yield
    await get_backend_lazy().aclose()


app = FastAPI(
    title="POS Retail",
    description="Cart, checkout and reporting API for the retail till",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pos_router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}
