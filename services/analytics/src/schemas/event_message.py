from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventMessage(BaseModel):
    """Notification published after a state change."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_type: str = Field(..., description="e.g. ALERT_CREATED, ALERT_READ")
    entity_type: str = Field(..., description="ORDER | PRODUCT | ALERT | ANALYTICS")
    entity_id: Optional[int] = Field(None, description="Id of the changed entity")
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the change happened (ISO-8601 on the wire)",
    )
    source: str = "analytics-api"

    @property
    def message_key(self) -> str:
        return str(self.entity_id) if self.entity_id is not None else "analytics"
