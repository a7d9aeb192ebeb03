from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import store_errors
from ..models.video import Video


async def list_videos(db: AsyncSession) -> list[Video]:
    """Every row of the catalog; no ordering is promised."""

    async with store_errors("list videos"):
        return list((await db.execute(select(Video))).scalars().all())
