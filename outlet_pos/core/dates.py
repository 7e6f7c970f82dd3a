from datetime import date, datetime
from zoneinfo import ZoneInfo

from outlet_pos.config import get_settings


def business_tz():
    """Timezone that defines the trading day, or None for server-local time."""
    name = (get_settings().BUSINESS_TZ or "").strip()
    if not name or name.lower() == "local":
        return None
    return ZoneInfo(name)


def business_today() -> date:
    tz = business_tz()
    if tz is None:
        return datetime.now().date()
    return datetime.now(tz).date()
