from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase (wire format) as well as snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RagQueryRequest(CamelModel):
    query: str = Field(min_length=1)
    scope: str | None = None
    person_id: str | None = None
    dept_name: str | None = None
    work_id: str | None = None
    project_id: str | None = None
    top_k: int | None = None


class SimilarNotesRequest(CamelModel):
    query: str = Field(min_length=1)
    top_k: int | None = None
    min_score: float | None = None


class MeetingMinuteSearchRequest(CamelModel):
    query: str
    limit: int = 5


class WorkNoteWebhookRequest(CamelModel):
    work_id: str
    event: str = "upsert"
    chunk_count: int | None = None
