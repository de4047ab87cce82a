from enum import Enum
from typing import Optional


class Mode(str, Enum):
    """Inbound `mode` parameter.

    `api` and `test` use the automation sitemap list and JSON payloads;
    every other mode uses the visual list and rendered pages. Unrecognised
    values parse as OTHER: an auto-refreshing page that always needs the key.
    """
    WARM = "warm"
    DEBUG = "debug"
    API = "api"
    TEST = "test"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Mode":
        if raw is None or raw.strip() == "":
            return cls.WARM
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.OTHER

    @property
    def is_automation(self) -> bool:
        return self in (Mode.API, Mode.TEST)

    @property
    def is_visual(self) -> bool:
        """Browser modes that may skip the key in clean URL mode."""
        return self in (Mode.WARM, Mode.DEBUG)
