"""Global test fixtures and utilities for reflxy tests"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from datetime import datetime, timedelta, timezone

from reflxy.db.insight_store import InMemoryInsightStore
from reflxy.models.analysis import AnalysisSample


# ============================================================================
# Analysis Fixtures
# ============================================================================

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def base_time():
    """Timestamp of the first analysis in generated histories"""
    return BASE_TIME


@pytest.fixture
def make_sample():
    """Factory for AnalysisSample with sensible defaults"""
    def _make(
        clarity=70,
        warmth=60,
        risk=30,
        words=20,
        scenario=None,
        created_at=None,
        text=None,
    ):
        return AnalysisSample(
            clarity=clarity,
            warmth=warmth,
            risk=risk,
            text=text if text is not None else " ".join(["word"] * words),
            scenario=scenario,
            created_at=created_at or BASE_TIME,
        )
    return _make


@pytest.fixture
def make_history(make_sample):
    """Factory for a list of samples one hour apart, oldest first"""
    def _make(rows):
        return [
            make_sample(created_at=BASE_TIME + timedelta(hours=index), **row)
            for index, row in enumerate(rows)
        ]
    return _make


# ============================================================================
# Store & API Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Fresh in-memory insight store"""
    return InMemoryInsightStore()


@pytest.fixture
def build_completion():
    """Factory for mock chat completion responses carrying content"""
    def _build(content):
        response = MagicMock()
        choice = MagicMock()
        choice.message.content = content
        response.choices = [choice]
        return response
    return _build


@pytest.fixture
def mock_openai_client():
    """Mock AsyncOpenAI client; set .chat.completions.create.return_value per test"""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client
