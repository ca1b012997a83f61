"""Encoding of work note attributes into vector metadata."""

from shared.models.document import WorkNote

# vector metadata string fields are bounded in bytes, not characters
METADATA_MAX_BYTES = 60


def truncate_to_bytes(value: str, max_bytes: int = METADATA_MAX_BYTES) -> str:
    """Truncate a string to at most max_bytes UTF-8 bytes without splitting a character."""
    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def build_scope_metadata(work_note: WorkNote) -> dict:
    """Scope metadata of a work note, as stored with each of its chunks.

    Args:
        work_note (WorkNote): The work note.

    Returns:
        dict: person_ids, dept_name, project_id, category and created_at_bucket; unset attributes are omitted.
    """
    metadata: dict = {"person_ids": list(work_note.person_ids)}
    if work_note.dept_name:
        metadata["dept_name"] = truncate_to_bytes(work_note.dept_name)
    if work_note.project_id:
        metadata["project_id"] = work_note.project_id
    if work_note.category:
        metadata["category"] = truncate_to_bytes(work_note.category)
    if work_note.created_at:
        metadata["created_at_bucket"] = work_note.created_at.strftime("%Y-%m-%d")
    return metadata
