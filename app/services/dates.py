from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.config import settings


def local_today() -> date:
    """Today's calendar date in the configured zone (server local if unset)."""
    if settings.timezone:
        return datetime.now(ZoneInfo(settings.timezone)).date()
    return date.today()
