import sys

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from contextlib import asynccontextmanager

from core.config import settings
from db.database import create_db_and_tables
from routers.bottles import router as bottles_router
from routers.gases import router as gases_router
from routers.transactions import router as transactions_router

# Configure logging
logger.remove()
logger.add(sys.stderr, level=settings.log_level)
if settings.log_file:
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Gas Bottle Ledger API")
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Gas Bottle Ledger API",
    description="API for tracking refrigerant gas bottles and their transactions",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(bottles_router, prefix="/bottles", tags=["bottles"])
app.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
app.include_router(gases_router, prefix="/gases", tags=["gases"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
