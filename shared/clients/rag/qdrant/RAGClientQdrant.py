from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import VectorMatch
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.scope import ScopeFilter


class RAGClientQdrant(RAGClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="work_notes", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default="work_notes"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_query(self) -> str:
        return f"/collections/{self._collection_name}/points/search"

    def _get_endpoint_scroll(self) -> str:
        return f"/collections/{self._collection_name}/points/scroll"

    def _get_endpoint_points(self) -> str:
        return f"/collections/{self._collection_name}/points?wait=true"

    def _get_endpoint_delete_points(self) -> str:
        return f"/collections/{self._collection_name}/points/delete?wait=true"

    def _get_endpoint_check_collection_existence(self) -> str:
        return f"/collections/{self._collection_name}/exists"

    def _get_endpoint_create_collection(self) -> str:
        return f"/collections/{self._collection_name}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_filter_payload(self, scope_filter: ScopeFilter) -> dict | None:
        if scope_filter.is_global():
            return None
        # a match condition on an array payload field is satisfied by any element,
        # so "contains" and "equals" share the same condition
        return {"must": [{"key": scope_filter.key, "match": {"value": scope_filter.value}}]}

    def get_query_payload(self, vector: list[float], top_k: int, filter: dict | None, with_payload: bool) -> dict:
        payload = {
            "vector": vector,
            "limit": top_k,
            "with_payload": with_payload,
            "with_vector": False,
        }
        if filter is not None:
            payload["filter"] = filter
        return payload

    def get_scroll_payload(self, filter: dict | None, limit: int, offset: str | None = None) -> dict:
        payload = {
            "limit": limit,
            "with_payload": ["chunk_id"],
            "with_vector": False,
        }
        if filter is not None:
            payload["filter"] = filter
        if offset is not None:
            payload["offset"] = offset
        return payload

    def get_delete_payload(self, point_ids: list[str]) -> dict:
        return {"points": point_ids}

    def get_create_collection_payload(self, vector_size: int, distance: str) -> dict:
        return {"vectors": {"size": vector_size, "distance": distance}}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_query_matches(self, raw_response: dict) -> list[VectorMatch]:
        matches: list[VectorMatch] = []
        for hit in raw_response.get("result", []) or []:
            payload = hit.get("payload") or {}
            chunk_id = payload.get("chunk_id")
            if chunk_id is None:
                # points written by something other than the indexer
                self.logging.warning("Qdrant point %s has no chunk_id payload. Ignoring.", hit.get("id"))
                continue
            matches.append(VectorMatch(id=chunk_id, score=float(hit.get("score", 0.0)), metadata=payload))
        return matches

    def extract_scroll_page(self, raw_response: dict) -> tuple[list[str], str | None]:
        result = raw_response.get("result", {}) or {}
        chunk_ids = [
            point["payload"]["chunk_id"]
            for point in result.get("points", []) or []
            if (point.get("payload") or {}).get("chunk_id")
        ]
        return chunk_ids, result.get("next_page_offset")
