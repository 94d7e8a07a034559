from pydantic import BaseModel
from typing import List, Literal, Optional, Union

from supportdash.schemas.common import CamelModel

ChangeType = Literal["positive", "negative", "neutral"]

class KpiStat(CamelModel):
    id: str
    title: str
    value: Union[int, str]  # formatted counts are strings ("1.2K")
    change: float
    change_type: ChangeType
    icon: str
    description: str
    category: Literal["users", "messages", "tickets", "surveys", "atenciones"]

class StatsResponse(BaseModel):
    success: bool
    data: List[KpiStat]
    configured: bool
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: str

class FunnelData(CamelModel):
    n0: int  # conversations closed by the bot
    n1: int  # conversations escalated to a ticket
    total: int
    n0_percentage: int
    n1_percentage: int

class DailyMetric(CamelModel):
    date: str  # YYYY-MM-DD
    label: str  # "Dom 5"
    messages: int
    conversations: int
    users: int
    tickets: int

class HourlyBucket(CamelModel):
    hour: int
    messages: int

class AnalyticsData(CamelModel):
    funnel: FunnelData
    daily_metrics: List[DailyMetric]
    hourly_distribution: List[HourlyBucket]

class AnalyticsResponse(BaseModel):
    success: bool
    data: AnalyticsData
    configured: bool
    message: Optional[str] = None
    error: Optional[str] = None
    timestamp: str
