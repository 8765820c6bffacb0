"""Analysis-related Pydantic models"""
import math
from typing import Optional, Literal
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator

Scenario = Literal["boss", "partner", "client"]

SCENARIO_KEYS: tuple[str, ...] = ("boss", "partner", "client")


def clamp_score(value: Optional[float]) -> int:
    """Round a score and clamp it to 0-100 (missing or non-finite values become 0)"""
    if value is None:
        return 0
    value = float(value)
    if not math.isfinite(value):
        return 0
    return max(0, min(100, math.floor(value + 0.5)))


class AnalysisSample(BaseModel):
    """One historical message analysis"""
    clarity: int
    warmth: int
    risk: int
    text: str = ""
    scenario: Optional[str] = None  # boss, partner, client; anything else is ignored by scenario stats
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("clarity", "warmth", "risk", mode="before")
    @classmethod
    def _clamp(cls, value: Optional[float]) -> int:
        return clamp_score(value)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are read as UTC so samples stay mutually comparable
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ScenarioAverage(BaseModel):
    """Average scores for one scenario (zeros when count is 0)"""
    count: int = 0
    clarity: float = 0.0
    warmth: float = 0.0
    risk: float = 0.0


def _empty_scenarios() -> dict[str, ScenarioAverage]:
    return {key: ScenarioAverage() for key in SCENARIO_KEYS}


class PatternStats(BaseModel):
    """Descriptive statistics over a window of analyses"""
    count: int = 0
    avg_clarity: float = 0.0
    avg_warmth: float = 0.0
    avg_risk: float = 0.0
    avg_words: float = 0.0
    std_clarity: float = 0.0
    std_warmth: float = 0.0
    std_risk: float = 0.0
    std_words: float = 0.0
    corr_words_clarity: float = 0.0
    corr_words_warmth: float = 0.0
    risk_now_avg: float = 0.0
    risk_week_avg: float = 0.0
    risk_delta: float = 0.0
    scenario_averages: dict[str, ScenarioAverage] = Field(default_factory=_empty_scenarios)
