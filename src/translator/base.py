"""Translation backend interface."""

from abc import ABC, abstractmethod

from models.models import TranslationRequest, TranslationResult


class TranslationPort(ABC):
    """Single entry point to the translation capability.

    Implementations return a ``TranslationResult`` for anything the backend
    answered, including application-level rejections (``status_code`` other
    than 200). Problems below that level, such as an unreachable backend,
    are raised as ``api.errors.TransportFailure``.
    """

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> TranslationResult:
        ...

    async def aclose(self) -> None:
        """Release network resources held by the backend."""
