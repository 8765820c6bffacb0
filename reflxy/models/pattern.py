"""Pattern insight Pydantic models"""
from typing import Optional, Literal, Union
from datetime import datetime, timezone
from pydantic import BaseModel, Field

PatternType = Literal["temporal", "length", "scenario", "consistency"]

PATTERN_TYPES: tuple[str, ...] = ("temporal", "length", "scenario", "consistency")


class PatternCandidate(BaseModel):
    """A scored pattern hypothesis that may be surfaced to the user"""
    type: PatternType
    insight: str
    strength: float = Field(ge=0.0, le=1.0)
    fingerprint: str  # e.g. "temporal:delayed:10"
    metadata: dict[str, Union[int, float, str]] = Field(default_factory=dict)


class CachedPatternInsight(BaseModel):
    """The last insight shown to a user"""
    user_id: str
    insight: str
    fingerprint: str
    analysis_count: int = 0
    last_analysis_at: Optional[datetime] = None
    pattern_type: Optional[str] = None
    strength: Optional[float] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
