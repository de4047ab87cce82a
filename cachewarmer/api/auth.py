import logging
import secrets
from typing import Optional

from fastapi import HTTPException

from cachewarmer.domain.mode import Mode
from cachewarmer.domain.settings import WarmerSettings

logger = logging.getLogger(__name__)

UNAUTHORIZED_MSG = "⛔ Unauthorized: Invalid or Missing Key"


# Clean visual requests (warm/debug with VISUAL_MODE on) never need the key.
# With no API_KEY configured there is nothing to compare against and every
# request is let through; a warning makes that visible in the logs.
def require_trigger_key(settings: WarmerSettings, mode: Mode, key: Optional[str]) -> bool:
    if not settings.requires_auth(mode):
        return True
    if not settings.api_secret:
        logger.warning("API_KEY not set - %s request accepted without a key", mode.value)
        return True
    if not secrets.compare_digest(key or "", settings.api_secret):
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_MSG)
    return True
