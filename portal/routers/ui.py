from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import StoreError
from ..core.jinja import render
from ..crud.videos import list_videos
from ..db.session import get_db
from ..deps.auth import require_login
from .auth_ui import FLASH_KEY

router = APIRouter(dependencies=[Depends(require_login)])


@router.get("/", response_class=HTMLResponse)
async def index_page(request: Request, db: AsyncSession = Depends(get_db)):
    try:
        videos = await list_videos(db)
    except StoreError as exc:
        exc.public_message = "Database query error"
        raise
    # shown once, then gone
    success = request.session.pop(FLASH_KEY, None)
    return render(request, "index.html", {"videos": videos, "success": success})
