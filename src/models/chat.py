"""Chat request/response payloads and visualization descriptors."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field, ValidationError, field_validator

from models.audience import AudiencePreviewData
from models.base import CamelModel
from utils.validators import ensure_text


class QueryContext(CamelModel):
    """Conversation memory passed back and forth by the client between turns."""

    last_query: Optional[str] = None
    last_dimension: Optional[str] = None
    last_metric: Optional[str] = None
    last_filters: Optional[Dict[str, List[str]]] = None
    last_results: Optional[List[Dict[str, Any]]] = None

    @property
    def has_history(self) -> bool:
        return bool(self.last_query and self.last_query.strip())

    @classmethod
    def from_payload(cls, raw: Any) -> "QueryContext":
        """Parse leniently: anything malformed counts as no prior context."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return cls()


class VisualizationType(str, Enum):
    BAR = "bar"
    LINE = "line"
    GROUPED_BAR = "grouped_bar"
    METRICS = "metrics"
    TABLE = "table"
    FUNNEL = "funnel"
    AUDIENCE_PREVIEW = "audience_preview"


class ActionKind(str, Enum):
    CREATE_AUDIENCE = "create_audience"
    EXPORT_CSV = "export_csv"
    SCHEDULE_REPORT = "schedule_report"
    LAUNCH_CAMPAIGN = "launch_campaign"
    REFINE_AUDIENCE = "refine_audience"


class ChartDataPoint(CamelModel):
    label: str
    value: Union[int, float]
    group: Optional[str] = None
    color: Optional[str] = None


class MetricData(CamelModel):
    label: str
    value: Union[int, float, str]
    change: Optional[float] = None
    change_label: Optional[str] = None


class TableColumn(CamelModel):
    key: str
    label: str


class TableData(CamelModel):
    columns: List[TableColumn]
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class FunnelStage(CamelModel):
    """Funnel step; ``conversion_rate`` is the rate into the next stage."""

    stage: str
    count: Union[int, float]
    conversion_rate: Optional[float] = None


VisualizationData = Union[
    List[ChartDataPoint],
    List[MetricData],
    TableData,
    List[FunnelStage],
    AudiencePreviewData,
]


class Visualization(CamelModel):
    """Tagged payload for the rendering layer; ``type`` decides the shape of ``data``."""

    type: VisualizationType
    title: Optional[str] = None
    data: VisualizationData
    x_key: Optional[str] = None
    y_key: Optional[str] = None
    group_key: Optional[str] = None


class ActionButton(CamelModel):
    id: str
    label: str
    icon: str
    action: ActionKind
    payload: Optional[Dict[str, Any]] = None


class ChatMessage(CamelModel):
    """Assistant (or user) turn rendered by the chat widget."""

    id: str = Field(default_factory=lambda: f"msg-{uuid.uuid4().hex[:12]}")
    role: Literal["user", "assistant"] = "assistant"
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    visualization: Optional[Visualization] = None
    actions: Optional[List[ActionButton]] = None


class ChatRequest(CamelModel):
    """Inbound chat payload."""

    message: str
    context: QueryContext = Field(default_factory=QueryContext)

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, value: Any) -> str:
        """Reject non-string and blank messages before they reach the router."""
        return ensure_text(value, "message")

    @field_validator("context", mode="before")
    @classmethod
    def parse_context(cls, value: Any) -> QueryContext:
        return QueryContext.from_payload(value)


class ChatResponse(CamelModel):
    """Outbound chat payload: the message plus the context for the next turn."""

    message: ChatMessage
    context: QueryContext
