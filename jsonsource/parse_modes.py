import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ParseMode(Enum):
    """What to do with a record that cannot be parsed."""

    PERMISSIVE = "PERMISSIVE"
    DROPMALFORMED = "DROPMALFORMED"
    FAILFAST = "FAILFAST"

    @classmethod
    def from_string(cls, mode: str) -> "ParseMode":
        """Case-insensitive lookup; unknown names fall back to PERMISSIVE."""
        try:
            return cls[mode.strip().upper()]
        except KeyError:
            logger.warning(f"{mode} is not a valid parse mode. Using {cls.PERMISSIVE.value}.")
            return cls.PERMISSIVE
