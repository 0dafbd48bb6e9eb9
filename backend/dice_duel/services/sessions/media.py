import logging
from abc import ABC, abstractmethod
from typing import Optional

OUTCOME_WIN = 'win'
OUTCOME_LOSE = 'lose'


class MediaProvider(ABC):
    """Looks up decorative media (a GIF url, say) for a result screen."""

    @abstractmethod
    def lookup(self, outcome: str) -> Optional[str]:
        ...


class NullMediaProvider(MediaProvider):
    def lookup(self, outcome: str) -> Optional[str]:
        return None


def fetch_result_media(provider: MediaProvider, outcome: str, logger=None) -> Optional[str]:
    """Ask the provider for media. Failures are logged and yield None."""
    logger = logger or logging.getLogger(__name__)
    try:
        return provider.lookup(outcome) or None
    except Exception as exc:
        logger.warning(f"[media-fail] outcome={outcome} error={exc}")
        return None
