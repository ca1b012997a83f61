from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.dms.models.Listing import ListingPage
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import MeetingMinute, TaskSummary, WorkNote
from shared.models.errors import ClientRequestError


class DMSClientInterface(ClientInterface):
    """Document store: the source of truth for work notes, their todos and meeting minutes."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "dms"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_work_notes_batch(self) -> str:
        """
        Returns the endpoint path for fetching several work notes by ID in one request.
        """
        pass

    @abstractmethod
    def _get_endpoint_work_note_details(self, work_id: str) -> str:
        """
        Returns the endpoint path for a single work note (e.g. "/api/work-notes/{id}").
        """
        pass

    @abstractmethod
    def _get_endpoint_todos_batch(self) -> str:
        """
        Returns the endpoint path for fetching the open todos of several work notes.
        """
        pass

    @abstractmethod
    def _get_endpoint_work_note_ids(self, page: int = 1, page_size: int = 100) -> str:
        """
        Returns the endpoint path for paginated listing of all work note IDs.
        """
        pass

    @abstractmethod
    def _get_endpoint_meeting_minutes(self, page: int = 1, page_size: int = 100) -> str:
        """
        Returns the endpoint path for paginated meeting minute listing.
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def _parse_listing_page(self, response: dict, requested_page: int) -> ListingPage:
        """
        Parses a paginated listing response into a ListingPage.
        """
        pass

    @abstractmethod
    def _parse_work_note(self, raw: dict) -> WorkNote:
        pass

    @abstractmethod
    def _parse_work_notes_batch(self, response: dict) -> list[WorkNote]:
        pass

    @abstractmethod
    def _parse_todos_batch(self, response: dict) -> dict[str, list[TaskSummary]]:
        pass

    @abstractmethod
    def _parse_meeting_minute(self, raw: dict) -> MeetingMinute:
        pass

    @abstractmethod
    def _get_work_notes_batch_payload(self, work_ids: list[str]) -> dict:
        pass

    @abstractmethod
    def _get_todos_batch_payload(self, work_ids: list[str]) -> dict:
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ############# BATCH REQUESTS ##############
    async def do_find_documents_by_ids(self, work_ids: list[str]) -> list[WorkNote]:
        """
        Fetches several work notes in one request.

        IDs unknown to the store are absent from the result; the order of the
        result is not guaranteed.

        Args:
            work_ids (list[str]): The work note IDs to fetch.

        Returns:
            list[WorkNote]: The work notes that still exist.
        """
        if not work_ids:
            return []
        resp = await self.do_request(
            method="POST",
            json=self._get_work_notes_batch_payload(work_ids),
            endpoint=self._get_endpoint_work_notes_batch(),
            raise_on_error=True,
        )
        return self._parse_work_notes_batch(resp.json())

    async def do_find_tasks_by_document_ids(self, work_ids: list[str]) -> dict[str, list[TaskSummary]]:
        """
        Fetches the open todos of several work notes in one request.

        Args:
            work_ids (list[str]): The work note IDs.

        Returns:
            dict[str, list[TaskSummary]]: Todos keyed by work note ID. Work notes without todos may be missing.
        """
        if not work_ids:
            return {}
        resp = await self.do_request(
            method="POST",
            json=self._get_todos_batch_payload(work_ids),
            endpoint=self._get_endpoint_todos_batch(),
            raise_on_error=True,
        )
        return self._parse_todos_batch(resp.json())

    ############# GET REQUESTS ##############
    async def do_fetch_document_details(self, work_id: str) -> WorkNote | None:
        """
        Fetches a single work note.

        Args:
            work_id (str): The work note ID.

        Returns:
            WorkNote | None: The work note, or None if the store does not know it.
        """
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_work_note_details(work_id))
        if resp.status_code == 404:
            return None
        if resp.status_code >= 300:
            self.logging.error("Fetching work note %s failed with status %d.", work_id, resp.status_code)
            raise ClientRequestError(url=str(resp.request.url), status_code=resp.status_code, body=resp.text)
        return self._parse_work_note(resp.json())

    ############# LISTING REQUESTS ##############
    async def do_fetch_document_ids(self) -> list[str]:
        """
        Fetches the IDs of all work notes, following pagination.

        Returns:
            list[str]: All work note IDs.
        """
        work_ids: list[str] = []
        page = 1
        page_size = 300
        while True:
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_work_note_ids(page=page, page_size=page_size), raise_on_error=True)
            listing = self._parse_listing_page(resp.json(), requested_page=page)
            work_ids.extend(str(item.get("workId")) for item in listing.items if item.get("workId") is not None)
            self.logging.info("Fetched work note ids page %d of %s from %s, total so far: %d of %s", page, listing.lastPage, self.get_engine_name(), len(work_ids), listing.overallCount)
            page = listing.nextPage
            if not page:
                break
        return work_ids

    async def do_fetch_meeting_minutes(self) -> list[MeetingMinute]:
        """
        Fetches all meeting minutes, following pagination.

        Returns:
            list[MeetingMinute]: The meeting minutes in store order.
        """
        minutes: list[MeetingMinute] = []
        page = 1
        page_size = 300
        while True:
            resp = await self.do_request(method="GET", endpoint=self._get_endpoint_meeting_minutes(page=page, page_size=page_size), raise_on_error=True)
            listing = self._parse_listing_page(resp.json(), requested_page=page)
            minutes.extend(self._parse_meeting_minute(item) for item in listing.items)
            self.logging.debug("Fetched meeting minutes page %d of %s from %s, total so far: %d", page, listing.lastPage, self.get_engine_name(), len(minutes))
            page = listing.nextPage
            if not page:
                break
        return minutes
