"""Models for records stored in and returned from a RAG backend."""

from pydantic import BaseModel


class VectorPoint(BaseModel):
    """Metadata payload stored alongside each chunk vector.

    Attributes:
        chunk_id:          Composite chunk identifier "{work_id}#chunk{index}".
        work_id:           The owning work note.
        scope:             Document kind tag, "WORK" for work notes.
        chunk_index:       Zero-based position of this chunk within the work note.
        person_ids:        Persons related to the work note.
        dept_name:         Department of the first related person.
        project_id:        Project the work note belongs to.
        category:          Work note category.
        created_at_bucket: Creation date as "YYYY-MM-DD".
    """

    chunk_id: str
    work_id: str
    scope: str = "WORK"
    chunk_index: int

    person_ids: list[str] = []
    dept_name: str | None = None
    project_id: str | None = None
    category: str | None = None
    created_at_bucket: str | None = None


class VectorMatch(BaseModel):
    """A nearest-neighbour hit returned by a vector query.

    id is the chunk id, not the backend point id.
    """

    id: str
    score: float
    metadata: dict = {}
