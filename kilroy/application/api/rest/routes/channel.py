"""Peculiar top-level files.

See http://developers.facebook.com/docs/reference/javascript
"""

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from kilroy.config import ONE_YEAR_SECONDS

router = APIRouter(tags=["site"])

CHANNEL_SCRIPT = '<script src="//connect.facebook.net/en_US/all.js"></script>'


@router.get("/channel.html", response_class=HTMLResponse)
async def channel() -> HTMLResponse:
    expires = datetime.now(timezone.utc) + timedelta(seconds=ONE_YEAR_SECONDS)
    return HTMLResponse(
        CHANNEL_SCRIPT,
        headers={
            "Pragma": "public",
            "Cache-Control": f"public, max-age={ONE_YEAR_SECONDS}",
            "Expires": format_datetime(expires, usegmt=True),
        },
    )
