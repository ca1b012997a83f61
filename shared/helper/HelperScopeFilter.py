"""Translation of a query scope into the metadata filter of a vector query."""

from shared.helper.HelperMetadata import truncate_to_bytes
from shared.models.errors import InvalidScopeParameters
from shared.models.scope import RagScope, ScopeFilter


def _require(value: str | None, name: str, scope: RagScope) -> str:
    if value is None or not str(value).strip():
        raise InvalidScopeParameters(f"{name} is required for {scope.value.upper()} scope")
    return str(value).strip()


def build_scope_filter(
    scope: RagScope | str | None,
    person_id: str | None = None,
    dept_name: str | None = None,
    work_id: str | None = None,
    project_id: str | None = None,
) -> ScopeFilter:
    """Build the ScopeFilter for a retrieval request.

    Args:
        scope (RagScope | str | None): global, person, department, work or project (case-insensitive). None means global.
        person_id (str | None): Required for the person scope.
        dept_name (str | None): Required for the department scope.
        work_id (str | None): Required for the work scope.
        project_id (str | None): Required for the project scope.

    Returns:
        ScopeFilter: The filter to hand to the vector index.

    Raises:
        InvalidScopeParameters: If the scope is unknown or its argument is missing.
    """
    if scope is None:
        return ScopeFilter()
    if not isinstance(scope, RagScope):
        try:
            scope = RagScope(str(scope).strip().lower())
        except ValueError:
            raise InvalidScopeParameters(f"Unsupported scope: {scope!r}")

    if scope == RagScope.GLOBAL:
        return ScopeFilter()
    if scope == RagScope.PERSON:
        return ScopeFilter(key="person_ids", value=_require(person_id, "personId", scope), operator="contains")
    if scope == RagScope.DEPARTMENT:
        return ScopeFilter(key="dept_name", value=truncate_to_bytes(_require(dept_name, "deptName", scope)))
    if scope == RagScope.WORK:
        return ScopeFilter(key="work_id", value=_require(work_id, "workId", scope))
    if scope == RagScope.PROJECT:
        return ScopeFilter(key="project_id", value=_require(project_id, "projectId", scope))
    raise InvalidScopeParameters(f"Unsupported scope: {scope!r}")
