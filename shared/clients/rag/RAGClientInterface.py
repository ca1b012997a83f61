from abc import abstractmethod
from typing import Any
import json
import uuid

import httpx

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.VectorPoint import VectorMatch, VectorPoint
from shared.helper.HelperConfig import HelperConfig
from shared.models.scope import ScopeFilter


def make_point_id(chunk_id: str) -> str:
    """Build a deterministic UUID5 point ID for a chunk.

    The same chunk always maps to the same point ID so that re-indexing
    overwrites rather than duplicates.

    Args:
        chunk_id (str): Composite chunk identifier "{work_id}#chunk{index}".

    Returns:
        str: UUID string usable as a backend point ID.
    """
    return str(uuid.uuid5(uuid.NAMESPACE_OID, chunk_id))


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "rag"

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_query(self) -> str:
        """Returns the endpoint path for nearest-neighbour queries (e.g. "/collections/c/points/search")."""
        pass

    @abstractmethod
    def _get_endpoint_scroll(self) -> str:
        """Returns the endpoint path for paginated point listing (e.g. "/collections/c/points/scroll")."""
        pass

    @abstractmethod
    def _get_endpoint_points(self) -> str:
        """Returns the endpoint path for point upserts (e.g. "/collections/c/points")."""
        pass

    @abstractmethod
    def _get_endpoint_delete_points(self) -> str:
        """Returns the endpoint path for point deletion (e.g. "/collections/c/points/delete")."""
        pass

    @abstractmethod
    def _get_endpoint_check_collection_existence(self) -> str:
        """Returns the endpoint path for the collection existence check."""
        pass

    @abstractmethod
    def _get_endpoint_create_collection(self) -> str:
        """Returns the endpoint path for collection creation."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_filter_payload(self, scope_filter: ScopeFilter) -> dict | None:
        """Translates a ScopeFilter into the backend filter syntax.

        Args:
            scope_filter (ScopeFilter): The scope predicate.

        Returns:
            dict | None: The backend filter, or None for a global scope.
        """
        pass

    @abstractmethod
    def get_query_payload(self, vector: list[float], top_k: int, filter: dict | None, with_payload: bool) -> dict:
        """Builds the backend-specific request body for a vector query."""
        pass

    @abstractmethod
    def get_scroll_payload(self, filter: dict | None, limit: int, offset: str | None = None) -> dict:
        """Builds the request body for one page of a point listing.

        Args:
            filter (dict | None): Backend filter, None lists every point.
            limit (int): Page size.
            offset (str | None): Cursor returned by the previous page, None for the first page.
        """
        pass

    @abstractmethod
    def get_delete_payload(self, point_ids: list[str]) -> dict:
        """Builds the backend-specific request body for deleting points by ID."""
        pass

    @abstractmethod
    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        """Builds the backend-specific request body for collection creation."""
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_query_matches(self, raw_response: dict) -> list[VectorMatch]:
        """Extracts the matches from a raw query response.

        The returned VectorMatch ids are chunk ids, taken from the payload.

        Args:
            raw_response (dict): The raw JSON response from the query endpoint.

        Returns:
            list[VectorMatch]: Matches in backend order (descending score).
        """
        pass

    @abstractmethod
    def extract_scroll_page(self, raw_response: dict) -> tuple[list[str], str | None]:
        """Extracts the chunk ids of one listing page and the cursor of the next page (None on the last page)."""
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_existence_check(self) -> bool:
        """Check if the collection exists in the rag backend."""
        resp = await self.do_request(method="GET", endpoint=self._get_endpoint_check_collection_existence(), raise_on_error=True)
        return bool(resp.json().get("result", {}).get("exists"))

    async def do_create_collection(self, vector_size: int = 1536, distance: str = "Cosine") -> httpx.Response:
        """Create the collection in the rag backend.

        Args:
            vector_size (int): The size of the vectors in the collection.
            distance (str): The distance metric for the vectors.
        """
        self.logging.info(
            "Creating %s collection (size=%d, distance=%s).", self.get_engine_name(), vector_size, distance
        )
        return await self.do_request(
            method="PUT",
            json=self.get_create_collection_payload(vector_size, distance),
            endpoint=self._get_endpoint_create_collection(),
            raise_on_error=True,
        )

    async def do_query(
        self,
        vector: list[float],
        top_k: int,
        scope_filter: ScopeFilter | None = None,
        with_payload: bool = True,
    ) -> list[VectorMatch]:
        """Query the nearest neighbours of a vector.

        Args:
            vector (list[float]): The query embedding.
            top_k (int): Maximum number of matches to return.
            scope_filter (ScopeFilter | None): Metadata predicate; None or a global filter matches everything.
            with_payload (bool): Whether to return the metadata alongside the scores.

        Returns:
            list[VectorMatch]: Matches ordered by descending score.
        """
        backend_filter = self.get_filter_payload(scope_filter) if scope_filter is not None else None
        resp = await self.do_request(
            method="POST",
            content=json.dumps(self.get_query_payload(vector, top_k, backend_filter, with_payload)),
            endpoint=self._get_endpoint_query(),
            additional_headers={"Content-Type": "application/json"},
            raise_on_error=True,
        )
        return self.extract_query_matches(resp.json())

    async def do_upsert_points(self, points: list[tuple[list[float], VectorPoint]]) -> httpx.Response:
        """Upsert chunk vectors into the collection.

        Inserts new points or replaces existing ones with the same chunk id.

        Args:
            points (list[tuple[list[float], VectorPoint]]): (vector, payload) pairs.
        """
        body: list[dict[str, Any]] = [
            {
                "id": make_point_id(payload.chunk_id),
                "vector": vector,
                "payload": payload.model_dump(),
            }
            for vector, payload in points
        ]
        return await self.do_request(
            method="PUT",
            content=json.dumps({"points": body}),
            endpoint=self._get_endpoint_points(),
            additional_headers={"Content-Type": "application/json"},
            raise_on_error=True,
        )

    async def do_delete_points_by_ids(self, chunk_ids: list[str]) -> None:
        """Delete the points of the given chunk ids. An empty list is a no-op.

        Args:
            chunk_ids (list[str]): Chunk identifiers "{work_id}#chunk{index}".
        """
        if not chunk_ids:
            return
        await self.do_request(
            method="POST",
            content=json.dumps(self.get_delete_payload([make_point_id(c) for c in chunk_ids])),
            endpoint=self._get_endpoint_delete_points(),
            additional_headers={"Content-Type": "application/json"},
            raise_on_error=True,
        )

    async def do_fetch_chunk_ids(self, work_id: str, page_size: int = 256) -> list[str]:
        """List the chunk ids currently stored for a work note.

        Pages through the listing endpoint until the backend reports no further page.

        Args:
            work_id (str): The work note whose chunks are listed.
            page_size (int): Points per page.

        Returns:
            list[str]: The stored chunk ids, in backend order.
        """
        backend_filter = self.get_filter_payload(ScopeFilter(key="work_id", value=work_id))
        chunk_ids: list[str] = []
        offset: str | None = None
        while True:
            resp = await self.do_request(
                method="POST",
                content=json.dumps(self.get_scroll_payload(backend_filter, page_size, offset)),
                endpoint=self._get_endpoint_scroll(),
                additional_headers={"Content-Type": "application/json"},
                raise_on_error=True,
            )
            page_ids, offset = self.extract_scroll_page(resp.json())
            chunk_ids.extend(page_ids)
            if not offset:
                break
        return chunk_ids
