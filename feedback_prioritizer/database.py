"""Database connection and operations."""
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from config import config
from models import Base, FeedbackItemRecord, NotificationSettingsRecord
from schemas import FeedbackItem, NotificationSettingsIn


# Create async engine
# StaticPool for SQLite to avoid threading issues
engine = create_async_engine(
    config.DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False
)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def init_db():
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        yield session


def get_db_session():
    """Get database session as context manager (for CLI usage).

    Returns:
        Async context manager for database session
    """
    return AsyncSessionLocal()


async def save_feedback_items(
    db: AsyncSession,
    items: Sequence[FeedbackItem]
) -> int:
    """Bulk insert scored feedback items.

    Args:
        db: Database session
        items: Items produced by intake

    Returns:
        Number of rows written
    """
    if not items:
        return 0

    db.add_all([FeedbackItemRecord.from_item(item) for item in items])
    await db.commit()

    return len(items)


async def fetch_recent_items(
    db: AsyncSession,
    limit: int = 100
) -> List[FeedbackItem]:
    """Read the most recently created items, newest first.

    Args:
        db: Database session
        limit: Maximum number of items

    Returns:
        Domain items with priority scores recomputed from urgency + impact
    """
    result = await db.execute(
        select(FeedbackItemRecord)
        .order_by(FeedbackItemRecord.created_at.desc())
        .limit(limit)
    )
    return [record.to_item() for record in result.scalars().all()]


async def get_notification_settings(db: AsyncSession) -> Optional[NotificationSettingsRecord]:
    """Return the stored notification settings row, if any."""
    result = await db.execute(
        select(NotificationSettingsRecord).order_by(NotificationSettingsRecord.id).limit(1)
    )
    return result.scalars().first()


async def save_notification_settings(
    db: AsyncSession,
    settings: NotificationSettingsIn
) -> NotificationSettingsRecord:
    """Create or update the single notification settings row.

    Args:
        db: Database session
        settings: Submitted preferences

    Returns:
        Saved NotificationSettingsRecord
    """
    record = await get_notification_settings(db)
    if record is None:
        record = NotificationSettingsRecord()
        db.add(record)

    for field, value in settings.model_dump().items():
        setattr(record, field, value)

    await db.commit()
    await db.refresh(record)

    return record
