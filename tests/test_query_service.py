"""Tests for answer assembly."""

import pytest

from server.api.services.QueryService import QueryService, truncate_snippet
from server.models.requests import RagQueryRequest
from shared.clients.rag.models.VectorPoint import VectorMatch
from shared.helper.HelperChunking import HelperChunking
from shared.models.errors import ClientRequestError, GenerationUnavailable, InvalidScopeParameters
from shared.models.scope import ScopeFilter


def make_query_service(helper_config, similarity_service, llm_client, chunking=None) -> QueryService:
    return QueryService(
        helper_config=helper_config,
        similarity_service=similarity_service,
        llm_client=llm_client,
        chunking=chunking or HelperChunking(),
    )


@pytest.fixture
def query_service(helper_config, similarity_service, llm_client) -> QueryService:
    return make_query_service(helper_config, similarity_service, llm_client)


class TestTruncateSnippet:
    def test_short_text_unchanged(self):
        assert truncate_snippet("short", 500) == "short"

    def test_long_text_gets_ellipsis(self):
        snippet = truncate_snippet("x" * 1000, 500)
        assert len(snippet) == 500
        assert snippet.endswith("...")


class TestQuery:
    @pytest.mark.asyncio
    async def test_empty_retrieval_still_answers(self, query_service, llm_client):
        """Test that the chat provider is called even when nothing was retrieved."""
        response = await query_service.do_query(RagQueryRequest(query="What happened with the migration?"))

        assert response.answer == "generated answer"
        assert response.contexts == []
        assert len(llm_client.prompts) == 1
        assert "Question: What happened with the migration?" in llm_client.prompts[0]

    @pytest.mark.asyncio
    async def test_contexts_follow_score_order(self, query_service, dms_client, rag_client, llm_client):
        dms_client.add_note("W1", "Server migration", "Move the API servers to the new cluster")
        dms_client.add_note("W2", "Budget review", "Quarterly budget for the platform team")
        rag_client.matches = [VectorMatch(id="W2#chunk0", score=0.92), VectorMatch(id="W1#chunk0", score=0.81)]

        response = await query_service.do_query(RagQueryRequest(query="servers"))

        assert [context.work_id for context in response.contexts] == ["W2", "W1"]
        assert response.contexts[0].title == "Budget review"
        assert response.contexts[0].snippet == "Budget review\n\nQuarterly budget for the platform team"
        assert response.contexts[0].score == 0.92
        prompt = llm_client.prompts[0]
        assert prompt.index("(ID: W2)") < prompt.index("(ID: W1)")

    @pytest.mark.asyncio
    async def test_default_retrieval_settings(self, query_service, rag_client, dms_client):
        dms_client.add_note("W1", "Weak match")
        rag_client.matches = [VectorMatch(id="W1#chunk0", score=0.45)]

        response = await query_service.do_query(RagQueryRequest(query="servers"))

        assert rag_client.query_calls[0]["top_k"] == 5
        assert response.contexts == []

    @pytest.mark.asyncio
    async def test_scope_and_top_k_reach_the_index(self, query_service, rag_client, dms_client):
        await query_service.do_query(RagQueryRequest(query="servers", scope="person", person_id="P-1", top_k=9))

        call = rag_client.query_calls[0]
        assert call["top_k"] == 9
        assert call["scope_filter"] == ScopeFilter(key="person_ids", value="P-1", operator="contains")
        assert dms_client.task_calls == []

    @pytest.mark.asyncio
    async def test_long_content_is_truncated(self, query_service, dms_client, rag_client):
        dms_client.add_note("W1", "Title", "x" * 1000)
        rag_client.matches = [VectorMatch(id="W1#chunk0", score=0.9)]

        response = await query_service.do_query(RagQueryRequest(query="x"))

        assert len(response.contexts[0].snippet) == 500
        assert response.contexts[0].snippet.startswith("Title\n\nxxx")
        assert response.contexts[0].snippet.endswith("...")

    @pytest.mark.asyncio
    async def test_snippet_comes_from_best_chunk(self, helper_config, similarity_service, llm_client, dms_client, rag_client):
        service = make_query_service(helper_config, similarity_service, llm_client, HelperChunking(chunk_size_tokens=5))
        dms_client.add_note("W1", "Title", "alpha beta gamma delta epsilon zeta")
        rag_client.matches = [VectorMatch(id="W1#chunk1", score=0.9)]

        response = await service.do_query(RagQueryRequest(query="gamma"))

        assert response.contexts[0].snippet == "gamma delta epsilon"

    @pytest.mark.asyncio
    async def test_stale_chunk_index_falls_back_to_first_chunk(self, query_service, dms_client, rag_client):
        dms_client.add_note("W1", "Title", "now a short note")
        rag_client.matches = [VectorMatch(id="W1#chunk4", score=0.9)]

        response = await query_service.do_query(RagQueryRequest(query="note"))

        assert response.contexts[0].snippet == "Title\n\nnow a short note"

    @pytest.mark.asyncio
    async def test_context_budget_drops_whole_documents(self, monkeypatch, helper_config, similarity_service, llm_client, dms_client, rag_client):
        monkeypatch.setenv("RAG_MAX_CONTEXT_CHARS", "200")
        service = make_query_service(helper_config, similarity_service, llm_client)
        dms_client.add_note("W1", "First", "a" * 100)
        dms_client.add_note("W2", "Second", "b" * 100)
        dms_client.add_note("W3", "Third", "c")
        rag_client.matches = [
            VectorMatch(id="W1#chunk0", score=0.9),
            VectorMatch(id="W2#chunk0", score=0.8),
            VectorMatch(id="W3#chunk0", score=0.7),
        ]

        response = await service.do_query(RagQueryRequest(query="letters"))

        assert [context.work_id for context in response.contexts] == ["W1"]
        assert "(ID: W2)" not in llm_client.prompts[0]
        assert "(ID: W3)" not in llm_client.prompts[0]

    @pytest.mark.asyncio
    async def test_invalid_scope_fails_before_retrieval(self, query_service, embed_client, llm_client):
        with pytest.raises(InvalidScopeParameters):
            await query_service.do_query(RagQueryRequest(query="servers", scope="department"))

        assert embed_client.calls == []
        assert llm_client.prompts == []

    @pytest.mark.asyncio
    async def test_generation_failure(self, query_service, llm_client):
        llm_client.error = ValueError("no message in response")

        with pytest.raises(GenerationUnavailable) as exc_info:
            await query_service.do_query(RagQueryRequest(query="servers"))

        assert exc_info.value.http_status == 502

    @pytest.mark.asyncio
    async def test_generation_rate_limit(self, query_service, llm_client):
        llm_client.error = ClientRequestError(url="http://llm/chat/completions", status_code=429)

        with pytest.raises(GenerationUnavailable) as exc_info:
            await query_service.do_query(RagQueryRequest(query="servers"))

        assert exc_info.value.rate_limited is True
        assert exc_info.value.http_status == 429
