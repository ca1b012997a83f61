"""Tests for the lexical meeting-minute reference search."""

import pytest

from server.api.services.MeetingMinuteReferenceService import (
    MeetingMinuteReferenceService,
    normalize_keywords,
    rank_meeting_minutes,
    score_meeting_minute,
    tokenize,
)
from shared.models.document import MeetingMinute


@pytest.fixture
def reference_service(helper_config, dms_client) -> MeetingMinuteReferenceService:
    return MeetingMinuteReferenceService(helper_config=helper_config, dms_client=dms_client)


@pytest.fixture
def corpus() -> list[MeetingMinute]:
    return [
        MeetingMinute(
            meeting_id="MEET-1",
            meeting_date="2026-02-15",
            topic="Q2 Roadmap Budget Sync",
            details="Roadmap budget prioritization and timeline discussion",
            keywords=["roadmap", "budget"],
        ),
        MeetingMinute(
            meeting_id="MEET-2",
            meeting_date="2026-02-14",
            topic="Roadmap Hiring Plan",
            details="Discussed roadmap and hiring plan dependencies",
            keywords=["roadmap", "hiring"],
        ),
        MeetingMinute(
            meeting_id="MEET-3",
            meeting_date="2026-02-13",
            topic="Operations Review",
            details="Postmortem and operational safeguards",
            keywords=["ops"],
        ),
    ]


class TestTokenize:
    def test_lowercases_and_dedupes(self):
        assert tokenize("Roadmap, roadmap; BUDGET!") == ["roadmap", "budget"]

    def test_punctuation_only(self):
        assert tokenize("!!! ((( )))") == []

    def test_keeps_non_latin_words(self):
        assert tokenize("예산 회의") == ["예산", "회의"]


class TestNormalizeKeywords:
    def test_cleans_up(self):
        assert normalize_keywords(["#Roadmap", "  Budget   Plan ", "roadmap", "", "#"]) == ["roadmap", "budget plan"]

    def test_caps_length(self):
        assert len(normalize_keywords([f"k{i}" for i in range(25)])) == 10


class TestRanking:
    def test_keyword_matches_outrank_text_matches(self, corpus):
        results = rank_meeting_minutes(corpus, "roadmap budget", limit=2)

        assert [reference.meeting_id for reference in results] == ["MEET-1", "MEET-2"]
        assert results[0].score > results[1].score
        assert results[0].keywords == ["roadmap", "budget"]
        assert results[1].keywords == ["roadmap", "hiring"]

    def test_keyword_weight(self, corpus):
        keyword_only = MeetingMinute(meeting_id="K", topic="", details="", keywords=["budget"])
        text_only = MeetingMinute(meeting_id="T", topic="budget", details="", keywords=[])

        assert score_meeting_minute(["budget"], keyword_only) == 3
        assert score_meeting_minute(["budget"], text_only) == 1

    def test_zero_scores_are_excluded(self, corpus):
        results = rank_meeting_minutes(corpus, "roadmap", limit=10)

        assert [reference.meeting_id for reference in results] == ["MEET-1", "MEET-2"]
        assert all(reference.score > 0 for reference in results)

    def test_ties_keep_corpus_order(self):
        corpus = [
            MeetingMinute(meeting_id="B", keywords=["alpha"]),
            MeetingMinute(meeting_id="A", keywords=["alpha"]),
        ]
        assert [reference.meeting_id for reference in rank_meeting_minutes(corpus, "alpha", limit=5)] == ["B", "A"]

    @pytest.mark.parametrize("limit", [0, 1, 5])
    def test_punctuation_query_matches_nothing(self, corpus, limit):
        assert rank_meeting_minutes(corpus, "!!! ((( )))", limit) == []

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit(self, corpus, limit):
        assert rank_meeting_minutes(corpus, "roadmap", limit) == []


class TestMeetingMinuteReferenceService:
    @pytest.mark.asyncio
    async def test_search_loads_corpus(self, reference_service, dms_client, corpus):
        dms_client.minutes = corpus

        results = await reference_service.do_search("roadmap budget", 2)

        assert [reference.meeting_id for reference in results] == ["MEET-1", "MEET-2"]
        assert dms_client.minute_calls == 1

    @pytest.mark.asyncio
    async def test_search_without_tokens_skips_store(self, reference_service, dms_client, corpus):
        dms_client.minutes = corpus

        assert await reference_service.do_search("?!", 5) == []
        assert await reference_service.do_search("roadmap", 0) == []
        assert dms_client.minute_calls == 0
