"""Pytest configuration and in-memory fakes for the retrieval bridge tests."""

import logging

import pytest
from fastapi import FastAPI

from server.api.error_handlers import register_exception_handlers
from server.api.routers.QueryRouter import query_router
from server.api.routers.WebhookRouter import webhook_router
from server.api.services.MeetingMinuteReferenceService import MeetingMinuteReferenceService
from server.api.services.QueryService import QueryService
from server.api.services.SimilarityService import SimilarityService
from services.note_index_sync.IndexService import IndexService
from shared.clients.rag.models.VectorPoint import VectorMatch, VectorPoint
from shared.helper.HelperChunking import HelperChunking
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import MeetingMinute, TaskSummary, WorkNote
from shared.models.scope import ScopeFilter


# -------------------------------------------------------------------------
# Fakes for the external collaborators
# -------------------------------------------------------------------------


class FakeEmbedClient:
    """Returns a constant vector per text; can be told to fail."""

    def __init__(self, dimension: int = 4):
        self.dimension = dimension
        self.error: Exception | None = None
        self.calls: list[list[str]] = []

    async def do_embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return [[float(len(text) % 7), 1.0, 0.0, 0.5][: self.dimension] for text in texts]

    async def do_embed_one(self, text: str) -> list[float]:
        vectors = await self.do_embed([text])
        return vectors[0]


class FakeRAGClient:
    """In-memory vector index. Query results are scripted via `matches`."""

    def __init__(self):
        self.matches: list[VectorMatch] = []
        self.points: dict[str, VectorPoint] = {}
        self.query_calls: list[dict] = []
        self.upsert_calls: list[list[tuple[list[float], VectorPoint]]] = []
        self.deleted: list[str] = []

    async def do_query(self, vector, top_k, scope_filter: ScopeFilter | None = None, with_payload: bool = True):
        self.query_calls.append({"vector": vector, "top_k": top_k, "scope_filter": scope_filter, "with_payload": with_payload})
        return list(self.matches)

    async def do_upsert_points(self, points):
        self.upsert_calls.append(list(points))
        for _, payload in points:
            self.points[payload.chunk_id] = payload

    async def do_fetch_chunk_ids(self, work_id: str) -> list[str]:
        return [chunk_id for chunk_id, payload in self.points.items() if payload.work_id == work_id]

    async def do_delete_points_by_ids(self, chunk_ids: list[str]) -> None:
        for chunk_id in chunk_ids:
            self.deleted.append(chunk_id)
            self.points.pop(chunk_id, None)


class FakeDMSClient:
    """In-memory document store."""

    def __init__(self):
        self.notes: dict[str, WorkNote] = {}
        self.todos: dict[str, list[TaskSummary]] = {}
        self.minutes: list[MeetingMinute] = []
        self.find_calls: list[list[str]] = []
        self.task_calls: list[list[str]] = []
        self.minute_calls = 0

    def add_note(self, work_id: str, title: str, content: str = "", **kwargs) -> WorkNote:
        note = WorkNote(work_id=work_id, title=title, content=content, **kwargs)
        self.notes[work_id] = note
        return note

    async def do_find_documents_by_ids(self, work_ids: list[str]) -> list[WorkNote]:
        self.find_calls.append(list(work_ids))
        return [self.notes[work_id] for work_id in work_ids if work_id in self.notes]

    async def do_find_tasks_by_document_ids(self, work_ids: list[str]) -> dict[str, list[TaskSummary]]:
        self.task_calls.append(list(work_ids))
        return {work_id: self.todos[work_id] for work_id in work_ids if work_id in self.todos}

    async def do_fetch_document_details(self, work_id: str) -> WorkNote | None:
        return self.notes.get(work_id)

    async def do_fetch_document_ids(self) -> list[str]:
        return list(self.notes.keys())

    async def do_fetch_meeting_minutes(self) -> list[MeetingMinute]:
        self.minute_calls += 1
        return list(self.minutes)


class FakeLLMClient:
    def __init__(self, answer: str = "generated answer"):
        self.answer = answer
        self.error: Exception | None = None
        self.prompts: list[str] = []

    async def do_complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


# -------------------------------------------------------------------------
# Fixtures
# -------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep tunables at their defaults regardless of the host environment."""
    for key in (
        "RAG_TOP_K", "RAG_MIN_SCORE", "RAG_MAX_CONTEXT_CHARS", "RAG_SNIPPET_MAX_CHARS",
        "SIMILAR_NOTES_TOP_K", "SIMILAR_NOTES_MIN_SCORE", "CHUNK_SIZE_TOKENS",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config() -> HelperConfig:
    return HelperConfig(logger=logging.getLogger("worknote_bridge.tests"))


@pytest.fixture
def embed_client() -> FakeEmbedClient:
    return FakeEmbedClient()


@pytest.fixture
def rag_client() -> FakeRAGClient:
    return FakeRAGClient()


@pytest.fixture
def dms_client() -> FakeDMSClient:
    return FakeDMSClient()


@pytest.fixture
def llm_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def chunking() -> HelperChunking:
    return HelperChunking()


@pytest.fixture
def similarity_service(helper_config, rag_client, embed_client, dms_client) -> SimilarityService:
    return SimilarityService(
        helper_config=helper_config,
        rag_client=rag_client,
        embed_client=embed_client,
        dms_client=dms_client,
    )


@pytest.fixture
def index_service(helper_config, dms_client, rag_client, embed_client, chunking) -> IndexService:
    return IndexService(
        helper_config=helper_config,
        dms_client=dms_client,
        rag_client=rag_client,
        embed_client=embed_client,
        chunking=chunking,
    )


@pytest.fixture
def api_app(monkeypatch, helper_config, similarity_service, index_service, dms_client, llm_client, chunking) -> FastAPI:
    """The API routers wired to the fakes, without the client-booting lifespan."""
    monkeypatch.setenv("APP_API_KEY", "test-key")
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(webhook_router)
    app.include_router(query_router)

    app.state.logging = helper_config.get_logger()
    app.state.config = helper_config
    app.state.similarity_service = similarity_service
    app.state.query_service = QueryService(
        helper_config=helper_config,
        similarity_service=similarity_service,
        llm_client=llm_client,
        chunking=chunking,
    )
    app.state.meeting_minute_service = MeetingMinuteReferenceService(helper_config=helper_config, dms_client=dms_client)
    app.state.index_service = index_service
    return app
