"""
Unit tests for insight_rewriter module

The OpenAI client is mocked; every failure mode must fall back to the
templated insight.
"""

import asyncio
import json
import pytest
from unittest.mock import AsyncMock

from reflxy.models.analysis import PatternStats
from reflxy.models.pattern import PatternCandidate
from reflxy.services.insight_rewriter import (
    InsightRewriter,
    build_rewrite_payload,
    is_acceptable_rewrite,
)


@pytest.fixture
def candidate():
    return PatternCandidate(
        type="temporal",
        insight="Your messages tend to more risk after the first read than in the moment.",
        strength=0.64,
        fingerprint="temporal:delayed:16",
        metadata={"temporal_diff": 16.0},
    )


@pytest.fixture
def stats():
    return PatternStats(count=10, avg_clarity=90.04, risk_now_avg=20, risk_week_avg=36, risk_delta=16)


class TestAcceptableRewrite:
    """Tests for is_acceptable_rewrite()"""

    def test_accepts_opener(self):
        assert is_acceptable_rewrite("Over time, your communication shows a slow build of tension.")

    def test_rejects_missing_opener(self):
        assert not is_acceptable_rewrite("You should soften your tone.")

    def test_rejects_too_long(self):
        assert not is_acceptable_rewrite("Your messages tend to " + "x" * 300)

    def test_rejects_non_strings(self):
        assert not is_acceptable_rewrite(None)
        assert not is_acceptable_rewrite(42)
        assert not is_acceptable_rewrite("   ")


class TestRewritePayload:
    """Tests for build_rewrite_payload()"""

    def test_payload_rounds_stats(self, candidate, stats):
        payload = build_rewrite_payload(candidate, stats)

        assert payload["candidate"]["fingerprint"] == "temporal:delayed:16"
        assert payload["stats"]["avg_clarity"] == 90.0
        assert set(payload["stats"]["scenario_averages"]) == {"boss", "partner", "client"}
        # Serializable as sent to the API
        json.dumps(payload)


class TestInsightRewriter:
    """Tests for InsightRewriter.rewrite()"""

    @pytest.mark.asyncio
    async def test_disabled_without_client(self, candidate, stats, monkeypatch):
        monkeypatch.setattr("reflxy.services.insight_rewriter.OPENAI_API_KEY", "")
        rewriter = InsightRewriter()

        assert rewriter.enabled is False
        assert await rewriter.rewrite(candidate, stats) == candidate.insight

    @pytest.mark.asyncio
    async def test_accepted_rewrite(self, candidate, stats, mock_openai_client, build_completion):
        text = "A recurring pattern in your messages is tension that grows after they are read."
        mock_openai_client.chat.completions.create.return_value = build_completion(
            json.dumps({"insight": text})
        )
        rewriter = InsightRewriter(client=mock_openai_client)

        result = await rewriter.rewrite(candidate, stats)

        assert result == text
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert "Your messages tend to" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_rewrite_without_opener_falls_back(self, candidate, stats, mock_openai_client, build_completion):
        mock_openai_client.chat.completions.create.return_value = build_completion(
            json.dumps({"insight": "You really need to calm down."})
        )
        rewriter = InsightRewriter(client=mock_openai_client)

        assert await rewriter.rewrite(candidate, stats) == candidate.insight

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back(self, candidate, stats, mock_openai_client, build_completion):
        mock_openai_client.chat.completions.create.return_value = build_completion("not json")
        rewriter = InsightRewriter(client=mock_openai_client)

        assert await rewriter.rewrite(candidate, stats) == candidate.insight

    @pytest.mark.asyncio
    async def test_api_error_falls_back(self, candidate, stats, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = RuntimeError("connection reset")
        rewriter = InsightRewriter(client=mock_openai_client)

        assert await rewriter.rewrite(candidate, stats) == candidate.insight

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, candidate, stats, mock_openai_client, build_completion):
        async def slow_create(**kwargs):
            await asyncio.sleep(1)
            return build_completion(json.dumps({"insight": "Your messages tend to wait."}))

        mock_openai_client.chat.completions.create = AsyncMock(side_effect=slow_create)
        rewriter = InsightRewriter(client=mock_openai_client, timeout=0.01)

        assert await rewriter.rewrite(candidate, stats) == candidate.insight
