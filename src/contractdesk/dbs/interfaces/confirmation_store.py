from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from contractdesk.models.analysis import AnalysisResult

EntryT = TypeVar("EntryT", bound=BaseModel)


class PendingConfirmation(BaseModel):
    """Analysis awaiting human confirmation, with the document kept as base64."""
    analysis: AnalysisResult
    document_base64: str
    file_name: str
    content_type: Optional[str] = None


class PendingActivation(BaseModel):
    """A created record that may still be activated."""
    record_id: str
    object_type: str = "Contract"
    display_number: Optional[str] = None


class AbstractConfirmationStore(ABC, Generic[EntryT]):
    """Short-lived entries keyed by (user, conversation). Expired entries are absent."""

    @abstractmethod
    async def put(self, user_id: str, conversation_id: str, entry: EntryT) -> None:
        pass

    @abstractmethod
    async def get(self, user_id: str, conversation_id: str) -> Optional[EntryT]:
        pass

    @abstractmethod
    async def discard(self, user_id: str, conversation_id: str) -> bool:
        pass
