"""Pydantic models for API payloads and the in-memory dataset."""

from models.audience import (  # noqa: F401
    AudienceCriteria,
    AudiencePreviewData,
    CampaignRecommendation,
    ROIProjection,
)
from models.chat import (  # noqa: F401
    ActionButton,
    ActionKind,
    ChartDataPoint,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    FunnelStage,
    MetricData,
    QueryContext,
    TableColumn,
    TableData,
    Visualization,
    VisualizationType,
)
from models.dataset import (  # noqa: F401
    CORE_ITINERARIES,
    AcquisitionChannel,
    Booking,
    CabinType,
    Campaign,
    CampaignType,
    Customer,
    CustomerSegment,
    Itinerary,
    LoyaltyTier,
    MarketingChannel,
)
from models.insight import (  # noqa: F401
    ChannelQuality,
    DarkSocialMetrics,
    DestinationQuality,
    EliteHousehold,
    GuardrailEffect,
    Insight,
    RelevancePremium,
)
