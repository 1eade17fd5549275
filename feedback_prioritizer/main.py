"""Main FastAPI application for feedback prioritization."""
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from config import config
from database import (
    init_db,
    get_db,
    fetch_recent_items,
    get_notification_settings,
    save_notification_settings,
)
from schemas import (
    AnalyticsSummary,
    AnalyzeResponse,
    FeedbackItem,
    FeedbackRequest,
    NotificationSettingsIn,
    NotificationSettingsOut,
    Quadrants,
)
from errors import ClassifierError
from pipeline import FeedbackPipeline
from quadrants import partition
from aggregator import summarize, utc_today
from scoring import sort_by_priority
from export import CSV_FILENAME, items_to_csv

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize services
pipeline = FeedbackPipeline()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("Initializing database...")
    await init_db()
    logger.info("Application started successfully")
    yield
    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title="Customer Feedback Prioritizer API",
    description="AI-powered feedback categorization by urgency and impact",
    version="1.0.0",
    lifespan=lifespan
)


@app.post("/feedback/analyze", response_model=AnalyzeResponse, status_code=status.HTTP_201_CREATED)
async def analyze_feedback(
    request: FeedbackRequest,
    db: AsyncSession = Depends(get_db)
):
    """Split feedback into items, score them, and store the results.

    This endpoint:
    1. Sends the text to the AI classifier (one request, no retries)
    2. Scores and ranks the returned items, dropping malformed ones
    3. Stores the items
    4. Flags items at or above the critical threshold

    Classifier failures surface as 429 (rate limited), 402 (payment
    required), 503 (not configured) or 502 (anything else).
    """
    try:
        outcome = await pipeline.analyze(db, request.text)
    except ClassifierError as e:
        logger.warning(f"Classification failed: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    items = outcome.intake.items
    return AnalyzeResponse(
        items=items,
        dropped=outcome.intake.dropped,
        quadrants=partition(items, config.thresholds()).counts(),
        alerts=[item.id for item in outcome.alerts]
    )


@app.get("/feedback", response_model=List[FeedbackItem])
async def list_feedback(
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """Most recent items ranked by priority score."""
    items = await fetch_recent_items(db, limit=limit)
    return sort_by_priority(items)


@app.get("/feedback/quadrants", response_model=Quadrants)
async def feedback_quadrants(
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """Urgency/impact matrix over the most recent items."""
    items = sort_by_priority(await fetch_recent_items(db, limit=limit))
    return partition(items, config.thresholds())


@app.get("/feedback/export.csv")
async def export_feedback(
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db)
):
    """Download the priority list as CSV."""
    items = sort_by_priority(await fetch_recent_items(db, limit=limit))
    return Response(
        content=items_to_csv(items),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'}
    )


@app.get("/analytics", response_model=AnalyticsSummary)
async def analytics(db: AsyncSession = Depends(get_db)):
    """Category, sentiment, quadrant, and trailing-week trend analytics."""
    items = await fetch_recent_items(db, limit=config.ANALYTICS_LIMIT)
    return summarize(
        items,
        today=utc_today(),
        thresholds=config.thresholds(),
        days=config.TREND_DAYS,
        zero_fill=config.SENTIMENT_ZERO_FILL
    )


@app.get("/settings/notifications", response_model=NotificationSettingsOut)
async def read_notification_settings(db: AsyncSession = Depends(get_db)):
    """Return stored notification preferences."""
    record = await get_notification_settings(db)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification settings not configured"
        )
    return record.to_dict()


@app.put("/settings/notifications", response_model=NotificationSettingsOut)
async def update_notification_settings(
    settings: NotificationSettingsIn,
    db: AsyncSession = Depends(get_db)
):
    """Create or replace notification preferences."""
    record = await save_notification_settings(db, settings)
    logger.info(f"Notification settings saved (threshold {record.critical_threshold})")
    return record.to_dict()


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns system status including AI availability.
    """
    return {
        "status": "healthy",
        "ai_provider": "healthy" if pipeline.analyzer.available else "degraded"
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Customer Feedback Prioritizer API",
        "version": "1.0.0",
        "endpoints": {
            "analyze": "POST /feedback/analyze",
            "list": "GET /feedback",
            "quadrants": "GET /feedback/quadrants",
            "export": "GET /feedback/export.csv",
            "analytics": "GET /analytics",
            "settings": "GET|PUT /settings/notifications",
            "health": "GET /health"
        }
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )
