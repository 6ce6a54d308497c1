from abc import ABC, abstractmethod
from typing import Any, Dict


class ProviderError(Exception):
    """Raised when an upstream chain or data service fails"""
    pass


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: float = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass
