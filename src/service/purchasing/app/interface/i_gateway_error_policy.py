from abc import ABC, abstractmethod
from typing import Optional

from src.platform.exception.exceptions import CustomBaseError


class IGatewayErrorPolicy(ABC):
    """Decides how a failed gateway call surfaces to the orchestrator."""

    @abstractmethod
    def classify_status(self, *, status_code: int, detail: Optional[str] = None) -> CustomBaseError:
        """Map a non-2xx gateway response to GatewayUnavailableError or GatewayRejectedError."""
        pass

    @abstractmethod
    def classify_transport_error(self, *, error: Exception) -> CustomBaseError:
        pass
