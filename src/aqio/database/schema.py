"""
Schema bootstrap: create every table registered on `Base.metadata` and seed the
default event categories.

Failures are reported as `MigrationFailedError`, which the error mapper turns
into `SystemUnavailableError(component="database_migrations")`.
"""

import logging
import time

from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from aqio.database.base import Base
from aqio.domain.entities import utcnow
from aqio.exceptions.infrastructure import MigrationFailedError
from aqio.models import EventCategoryModel

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[dict[str, str], ...] = (
    {
        "id": "conf",
        "name": "Conference",
        "description": "Large industry conferences and seminars",
        "color_hex": "#3B82F6",
        "icon_name": "presentation",
    },
    {
        "id": "workshop",
        "name": "Workshop",
        "description": "Hands-on training and educational sessions",
        "color_hex": "#10B981",
        "icon_name": "tools",
    },
    {
        "id": "networking",
        "name": "Networking",
        "description": "Social and professional networking events",
        "color_hex": "#F59E0B",
        "icon_name": "users",
    },
    {
        "id": "training",
        "name": "Training",
        "description": "Professional development and skill building",
        "color_hex": "#8B5CF6",
        "icon_name": "academic-cap",
    },
    {
        "id": "personal",
        "name": "Personal",
        "description": "Private celebrations and social gatherings",
        "color_hex": "#EC4899",
        "icon_name": "heart",
    },
    {
        "id": "meeting",
        "name": "Meeting",
        "description": "Business meetings and discussions",
        "color_hex": "#6B7280",
        "icon_name": "clipboard",
    },
)


async def create_schema(engine: AsyncEngine, *, seed: bool = True) -> None:
    """
    Create missing tables and (optionally) seed the default categories.

    Idempotent: existing tables are left alone and categories are only seeded into
    an empty `event_categories` table.
    """
    start = time.perf_counter()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

            seeded = 0
            if seed:
                table = EventCategoryModel.__table__
                existing = (await conn.execute(select(func.count()).select_from(table))).scalar_one()
                if existing == 0:
                    now = utcnow()
                    await conn.execute(
                        insert(table),
                        [{**category, "is_active": True, "created_at": now} for category in DEFAULT_CATEGORIES],
                    )
                    seeded = len(DEFAULT_CATEGORIES)
    except SQLAlchemyError as exc:
        logger.exception("schema.create.failed", extra={"url": engine.url.render_as_string(hide_password=True)})
        raise MigrationFailedError(f"Schema creation failed: {exc}") from exc

    logger.info(
        "schema.create.success",
        extra={
            "tables": sorted(Base.metadata.tables),
            "seeded_categories": seeded,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        },
    )


__all__ = ["DEFAULT_CATEGORIES", "create_schema"]
