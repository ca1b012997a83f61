"""Pydantic models for the documents the retrieval core works on.

Hierarchy:
  WorkNote        - a work note as delivered by the document store.
  TaskSummary     - an open todo attached to a work note.
  MeetingMinute   - an entry of the meeting-minute reference corpus.
  TextChunk       - a derived, size-bounded slice of a work note used for indexing.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WorkNote(BaseModel):
    """A work note with the attributes that qualify its retrieval scope."""

    work_id: str
    title: str
    content: str = ""
    category: str | None = None
    person_ids: list[str] = []
    dept_name: str | None = None
    project_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskSummary(BaseModel):
    """An open task (todo) related to a work note.

    Embedded in API responses, so it serialises with camelCase aliases like them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    todo_id: str
    title: str
    status: str | None = None
    due_date: str | None = None


class MeetingMinute(BaseModel):
    """A meeting minute used by the lexical reference search."""

    meeting_id: str
    meeting_date: str | None = None
    topic: str = ""
    details: str = ""
    keywords: list[str] = []


class TextChunk(BaseModel):
    """A contiguous slice of a work note's rendered text.

    Attributes:
        chunk_id:     Composite identifier "{work_id}#chunk{index}".
        work_id:      The owning document.
        chunk_index:  Zero-based, contiguous within the document.
        text:         The chunk text; the first chunk starts with the title.
        metadata:     Scope metadata plus work_id, scope and chunk_index.
    """

    chunk_id: str
    work_id: str
    chunk_index: int
    text: str
    metadata: dict = Field(default_factory=dict)
