from abc import ABC, abstractmethod

from sasktask.common.logging import get_logger


class BaseIntegration(ABC):
    """Common base for outbound service clients.

    Subclasses report whether credentials are present (``is_configured``) so
    callers can pick a local fallback without attempting a network call.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"integrations.{name}")

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the integration is reachable and functional."""
        ...
