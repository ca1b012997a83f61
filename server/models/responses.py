from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.models.document import TaskSummary


class CamelResponse(BaseModel):
    """Serialised with camelCase keys via model_dump(by_alias=True)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RagContextSnippet(CamelResponse):
    work_id: str
    title: str
    snippet: str
    score: float


class RagQueryResponse(CamelResponse):
    answer: str
    contexts: list[RagContextSnippet]


class SimilarWorkNote(CamelResponse):
    work_id: str
    title: str
    content: str
    category: str | None = None
    similarity_score: float
    chunk_index: int = 0
    todos: list[TaskSummary] = []


class SimilarNotesResponse(CamelResponse):
    results: list[SimilarWorkNote]
    total: int


class MeetingMinuteReference(CamelResponse):
    meeting_id: str
    meeting_date: str | None = None
    topic: str
    keywords: list[str]
    score: float


class MeetingMinuteSearchResponse(CamelResponse):
    query: str
    results: list[MeetingMinuteReference]
    total: int
