"""FastAPI application entry point."""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api import corporate_actions, lots
from database import get_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Corporate Actions",
    description="Splits, dividends, mergers and spinoffs applied to FIFO tax lots",
    version="0.1.0",
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(corporate_actions.router)
app.include_router(lots.router)
app.include_router(lots.securities_router)


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint; 503 when the lot ledger database is unreachable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "error", "database": "unavailable"})
    return {"status": "ok", "database": "ok"}
