import json
import math
from datetime import datetime

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Listing import ListingPage
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.document import MeetingMinute, TaskSummary, WorkNote


class DMSClientWorknote(DMSClientInterface):
    """Client for the internal HTTP API of the work-note application."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Worknote"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/health"

    def _get_endpoint_work_notes_batch(self) -> str:
        return "/api/internal/work-notes/batch"

    def _get_endpoint_work_note_details(self, work_id: str) -> str:
        return f"/api/work-notes/{work_id}"

    def _get_endpoint_todos_batch(self) -> str:
        return "/api/internal/work-notes/todos"

    def _get_endpoint_work_note_ids(self, page: int = 1, page_size: int = 100) -> str:
        return f"/api/internal/work-notes/ids?page={page}&pageSize={page_size}"

    def _get_endpoint_meeting_minutes(self, page: int = 1, page_size: int = 100) -> str:
        return f"/api/meeting-minutes?page={page}&pageSize={page_size}"

    ################ PAYLOAD BUILDER ##################
    def _get_work_notes_batch_payload(self, work_ids: list[str]) -> dict:
        return {"ids": work_ids}

    def _get_todos_batch_payload(self, work_ids: list[str]) -> dict:
        return {"workIds": work_ids, "openOnly": True}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_listing_page(self, response: dict, requested_page: int) -> ListingPage:
        items = response.get("items", []) or []
        total = response.get("total")
        page_size = response.get("pageSize") or len(items) or 1
        last_page = math.ceil(total / page_size) if total else None
        next_page = response.get("nextPage")
        if next_page is None and last_page is not None and requested_page < last_page:
            next_page = requested_page + 1
        return ListingPage(
            items=items,
            currentPage=requested_page,
            nextPage=next_page,
            overallCount=total,
            lastPage=last_page,
        )

    def _parse_work_note(self, raw: dict) -> WorkNote:
        return WorkNote(
            work_id=str(raw["workId"]),
            title=raw.get("title") or "",
            content=raw.get("contentRaw") or "",
            category=raw.get("category") or None,
            person_ids=[str(p) for p in (raw.get("personIds") or [])],
            dept_name=raw.get("deptName") or None,
            project_id=raw.get("projectId") or None,
            created_at=self._parse_datetime(raw.get("createdAt")),
            updated_at=self._parse_datetime(raw.get("updatedAt")),
        )

    def _parse_work_notes_batch(self, response: dict) -> list[WorkNote]:
        return [self._parse_work_note(item) for item in response.get("items", []) or []]

    def _parse_todos_batch(self, response: dict) -> dict[str, list[TaskSummary]]:
        todos: dict[str, list[TaskSummary]] = {}
        for work_id, items in (response.get("items") or {}).items():
            todos[str(work_id)] = [
                TaskSummary(
                    todo_id=str(item["todoId"]),
                    title=item.get("title") or "",
                    status=item.get("status"),
                    due_date=item.get("dueDate"),
                )
                for item in items or []
            ]
        return todos

    def _parse_meeting_minute(self, raw: dict) -> MeetingMinute:
        keywords = raw.get("keywords")
        if keywords is None and raw.get("keywordsJson"):
            keywords = json.loads(raw["keywordsJson"])
        return MeetingMinute(
            meeting_id=str(raw["meetingId"]),
            meeting_date=raw.get("meetingDate"),
            topic=raw.get("topic") or "",
            details=raw.get("detailsRaw") or "",
            keywords=[str(k) for k in (keywords or [])],
        )

    ##########################################
    ################ HELPERS #################
    ##########################################

    def _parse_datetime(self, value: str | None) -> datetime | None:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            self.logging.warning("Unparseable timestamp from work note store: %r", value)
            return None
