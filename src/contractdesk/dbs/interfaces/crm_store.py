from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from contractdesk.models.creation import AttachResult, CreateResult

Operator = Literal["=", "like", "!="]


class Condition(BaseModel):
    field: str
    operator: Operator = "="
    value: Any


class SearchExpression(BaseModel):
    """
    Adapter-neutral query: select ``fields`` from ``object_type`` where all
    ``conditions`` hold. ``like`` matches a substring.
    """
    object_type: str
    fields: Tuple[str, ...] = ("Id", "Name")
    conditions: List[Condition] = Field(default_factory=list)
    limit: int = 10

    def where(self, field: str, value: Any, operator: Operator = "=") -> "SearchExpression":
        return self.model_copy(update={"conditions": [*self.conditions, Condition(field=field, operator=operator, value=value)]})


class AbstractCrmStore(ABC):
    @abstractmethod
    async def search(self, expression: SearchExpression) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def create(self, object_type: str, fields: Dict[str, Any]) -> CreateResult:
        pass

    @abstractmethod
    async def update(self, object_type: str, record_id: str, fields: Dict[str, Any]) -> CreateResult:
        pass

    @abstractmethod
    async def attach(self, record_id: str, file_name: str, data: bytes) -> AttachResult:
        pass

    def record_url(self, object_type: str, record_id: str) -> Optional[str]:
        return None
