"""Similarity service: finds the work notes closest to a free-text query.

Pipeline: embed query text → vector query with scope filter → collapse chunk
matches per work note → similarity threshold → batched hydration of work
notes and their open todos from the document store.
"""

import asyncio

from server.models.responses import SimilarWorkNote
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import VectorMatch
from shared.helper.HelperChunking import parse_chunk_id
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import TaskSummary, WorkNote
from shared.models.errors import ClientRequestError, EmbeddingUnavailable, InvalidParameters, MalformedIdentifier
from shared.models.scope import ScopeFilter


def collapse_matches(matches: list[VectorMatch]) -> list[tuple[str, float, int]]:
    """Reduce chunk matches to the best-scoring chunk per work note.

    Args:
        matches (list[VectorMatch]): Matches in backend order.

    Returns:
        list[tuple[str, float, int]]: (work_id, best score, best chunk index),
            ordered by descending score; equal scores keep the order in which
            the work note first appeared.

    Raises:
        MalformedIdentifier: If a match id is not a valid chunk id.
    """
    best: dict[str, tuple[float, int]] = {}
    for match in matches:
        work_id, chunk_index = parse_chunk_id(match.id)
        current = best.get(work_id)
        if current is None or match.score > current[0]:
            best[work_id] = (match.score, chunk_index)
    collapsed = [(work_id, score, chunk_index) for work_id, (score, chunk_index) in best.items()]
    # sorted() is stable, so ties stay in first-seen order
    return sorted(collapsed, key=lambda item: item[1], reverse=True)


class SimilarityService:
    """Embedding-based retrieval of work notes."""

    def __init__(
        self,
        helper_config: HelperConfig,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
        dms_client: DMSClientInterface,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._rag = rag_client
        self._embed = embed_client
        self._dms = dms_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_find_similar(
        self,
        query_text: str,
        top_k: int,
        min_score: float,
        scope_filter: ScopeFilter | None = None,
        with_tasks: bool = True,
    ) -> list[SimilarWorkNote]:
        """Find the work notes most similar to a query text.

        Args:
            query_text (str): Free text to match.
            top_k (int): Number of chunk matches requested from the vector index.
                More than one chunk of the same work note may be among them.
            min_score (float): Work notes whose best chunk scores below this are dropped.
            scope_filter (ScopeFilter | None): Metadata filter; None searches everything.
            with_tasks (bool): Whether to attach the open todos of each work note.

        Returns:
            list[SimilarWorkNote]: Work notes ordered by descending similarity.

        Raises:
            InvalidParameters: If top_k <= 0.
            EmbeddingUnavailable: If the query could not be embedded.
            MalformedIdentifier: If the vector index returned an unexpected chunk id.
        """
        if top_k <= 0:
            raise InvalidParameters(f"topK must be positive, got {top_k}")

        vector = await self._embed_query(query_text)
        matches = await self._rag.do_query(vector=vector, top_k=top_k, scope_filter=scope_filter, with_payload=True)
        if not matches:
            self.logging.info("Similarity search returned no matches: query=%r", query_text[:80])
            return []

        try:
            ranked = collapse_matches(matches)
        except MalformedIdentifier as exc:
            self.logging.error("Vector index returned a malformed chunk id: %s", exc.message)
            raise

        ranked = [item for item in ranked if item[1] >= min_score]
        if not ranked:
            self.logging.info(
                "Similarity search: %d matches, none above min_score=%.2f", len(matches), min_score
            )
            return []

        work_ids = [work_id for work_id, _, _ in ranked]
        notes, todos = await self._hydrate(work_ids, with_tasks)

        results: list[SimilarWorkNote] = []
        for work_id, score, chunk_index in ranked:
            note = notes.get(work_id)
            if note is None:
                # vector entry of a deleted work note
                self.logging.debug("Dropping stale vector entry for work_id=%s", work_id)
                continue
            results.append(SimilarWorkNote(
                work_id=note.work_id,
                title=note.title,
                content=note.content,
                category=note.category,
                similarity_score=score,
                chunk_index=chunk_index,
                todos=todos.get(work_id, []),
            ))

        self.logging.info(
            "Similarity search complete: matches=%d documents=%d returned=%d",
            len(matches), len(ranked), len(results),
        )
        return results

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _embed_query(self, query_text: str) -> list[float]:
        try:
            return await self._embed.do_embed_one(query_text)
        except ClientRequestError as exc:
            self.logging.error("Embedding request failed with status %d.", exc.status_code)
            raise EmbeddingUnavailable(f"Embedding provider failed: {exc}", rate_limited=exc.status_code == 429) from exc
        except Exception as exc:
            self.logging.error("Embedding failed: %s", exc)
            raise EmbeddingUnavailable(f"Embedding provider failed: {exc}") from exc

    async def _hydrate(self, work_ids: list[str], with_tasks: bool) -> tuple[dict[str, WorkNote], dict[str, list[TaskSummary]]]:
        """Fetch work notes and (optionally) their todos concurrently.

        Returns:
            tuple[dict[str, WorkNote], dict[str, list[TaskSummary]]]: Work notes and todos keyed by work_id.
        """
        if with_tasks:
            notes, todos = await asyncio.gather(
                self._dms.do_find_documents_by_ids(work_ids),
                self._dms.do_find_tasks_by_document_ids(work_ids),
            )
        else:
            notes = await self._dms.do_find_documents_by_ids(work_ids)
            todos = {}
        return {note.work_id: note for note in notes}, todos or {}
