"""Indexing service.

Keeps the vector index in line with the work notes of the document store:
renders and chunks each work note, embeds the chunks in one batch, upserts
the resulting vectors with their scope metadata and finally removes chunks
left over from a longer previous revision.
"""

import asyncio

from pydantic import BaseModel

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.VectorPoint import VectorPoint
from shared.helper.HelperChunking import HelperChunking, format_chunk_id
from shared.helper.HelperConfig import HelperConfig
from shared.helper.HelperMetadata import build_scope_metadata
from shared.models.document import WorkNote
from shared.models.errors import ClientRequestError, DocumentNotFound, EmbeddingUnavailable

UPSERT_BATCH_SIZE = 100 # max points per upsert call
DOC_CONCURRENCY = 5     # max parallel document indexing


class ReindexResult(BaseModel):
    """Outcome of a full reindex run.

    Attributes:
        total:      Work notes known to the document store.
        processed:  Work notes attempted.
        succeeded:  Work notes indexed.
        failed:     Work notes that raised.
        errors:     One entry per failure, {"work_id": ..., "error": ...}.
    """

    total: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: list[dict] = []


class IndexService:
    """Orchestrates chunking, embedding and vector upserts for work notes."""

    def __init__(
        self,
        helper_config: HelperConfig,
        dms_client: DMSClientInterface,
        rag_client: RAGClientInterface,
        embed_client: EmbedClientInterface,
        chunking: HelperChunking,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._dms = dms_client
        self._rag = rag_client
        self._embed = embed_client
        self._chunking = chunking

    ##########################################
    ############ DOCUMENT INDEX ##############
    ##########################################

    async def do_index_document(self, document: WorkNote) -> int:
        """Index a single work note.

        New chunks are upserted first; stale chunks are deleted only after
        the upsert went through, so a failure never leaves the note unindexed.

        Args:
            document (WorkNote): The work note to index.

        Returns:
            int: Number of chunks written.

        Raises:
            EmbeddingUnavailable: If the chunks could not be embedded.
            ClientRequestError: If the vector index rejected a request.
        """
        chunks = self._chunking.chunk(
            document_id=document.work_id,
            title=document.title,
            body=document.content,
            scope_metadata=build_scope_metadata(document),
        )
        if not any(chunk.text.strip() for chunk in chunks):
            # embedding providers reject empty input; drop whatever an earlier revision left behind
            self.logging.warning("Work note %s has neither title nor body. Skipping it.", document.work_id)
            await self._rag.do_delete_points_by_ids(await self._rag.do_fetch_chunk_ids(document.work_id))
            return 0

        try:
            # batch embed, one request per embed batch for all chunks of this note
            vectors = await self._embed.do_embed([chunk.text for chunk in chunks])
        except ClientRequestError as exc:
            self.logging.error("Embedding failed for work_id=%s with status %d.", document.work_id, exc.status_code)
            raise EmbeddingUnavailable(f"Embedding provider failed: {exc}", rate_limited=exc.status_code == 429) from exc
        except Exception as exc:
            self.logging.error("Embedding failed for work_id=%s: %s", document.work_id, exc)
            raise EmbeddingUnavailable(f"Embedding provider failed: {exc}") from exc

        points = [(vector, VectorPoint(chunk_id=chunk.chunk_id, **chunk.metadata)) for chunk, vector in zip(chunks, vectors)]

        # upsert in batches to avoid oversized requests
        for batch_start in range(0, len(points), UPSERT_BATCH_SIZE):
            await self._rag.do_upsert_points(points[batch_start: batch_start + UPSERT_BATCH_SIZE])

        new_chunk_ids = {chunk.chunk_id for chunk in chunks}
        stored_chunk_ids = await self._rag.do_fetch_chunk_ids(document.work_id)
        stale_chunk_ids = [chunk_id for chunk_id in stored_chunk_ids if chunk_id not in new_chunk_ids]
        if stale_chunk_ids:
            await self._rag.do_delete_points_by_ids(stale_chunk_ids)
            self.logging.debug("Removed %d stale chunks of work_id=%s.", len(stale_chunk_ids), document.work_id)

        self.logging.info(
            "Indexed work_id=%s ('%s'): %d chunks upserted.", document.work_id, document.title, len(chunks)
        )
        return len(chunks)

    async def do_reindex_one(self, work_id: str) -> int:
        """Fetch a work note from the document store and index it.

        Raises:
            DocumentNotFound: If the work note does not exist.
        """
        document = await self._dms.do_fetch_document_details(work_id)
        if document is None:
            raise DocumentNotFound(f"Work note {work_id} not found")
        return await self.do_index_document(document)

    async def do_sync_document(self, work_id: str) -> None:
        """Bring the index in line with the current state of one work note.

        Used for webhook events: a note that no longer exists has its chunks
        removed. Failures are logged, not raised.
        """
        try:
            await self.do_reindex_one(work_id)
        except DocumentNotFound:
            self.logging.info("Work note %s no longer exists. Removing its chunks.", work_id)
            await self.do_remove_document(work_id)
        except Exception as exc:
            self.logging.error("Indexing of work_id=%s failed: %s", work_id, exc)

    async def do_remove_document(self, work_id: str, chunk_count_hint: int | None = None) -> int:
        """Delete the chunks of a work note from the vector index.

        Args:
            work_id (str): The work note.
            chunk_count_hint (int | None): Known chunk count; when given, the
                chunk ids are derived from it instead of being listed.

        Returns:
            int: Number of chunk ids deleted.
        """
        if chunk_count_hint is not None and chunk_count_hint > 0:
            chunk_ids = [format_chunk_id(work_id, index) for index in range(chunk_count_hint)]
        else:
            chunk_ids = await self._rag.do_fetch_chunk_ids(work_id)

        try:
            await self._rag.do_delete_points_by_ids(chunk_ids)
        except Exception as exc:
            self.logging.error("Removing chunks of work_id=%s failed: %s", work_id, exc)
            raise
        self.logging.info("Removed %d chunks of work_id=%s.", len(chunk_ids), work_id)
        return len(chunk_ids)

    ##########################################
    ############## FULL REINDEX ##############
    ##########################################

    async def do_reindex_all(self) -> ReindexResult:
        """Index every work note of the document store with bounded concurrency.

        A failing work note is recorded in the result and does not stop the run.

        Returns:
            ReindexResult: Counts and per-note errors.
        """
        self.logging.info("Starting full reindex...")
        work_ids = await self._dms.do_fetch_document_ids()
        if not work_ids:
            self.logging.warning("No work notes found in the document store. Nothing to index.")
            return ReindexResult()

        self.logging.info("Processing %d work notes...", len(work_ids))
        sem = asyncio.Semaphore(DOC_CONCURRENCY)

        async def _index(work_id: str) -> int:
            async with sem:
                return await self.do_reindex_one(work_id)

        outcomes = await asyncio.gather(*[_index(work_id) for work_id in work_ids], return_exceptions=True)

        result = ReindexResult(total=len(work_ids), processed=len(outcomes))
        for work_id, outcome in zip(work_ids, outcomes):
            if isinstance(outcome, Exception):
                result.failed += 1
                result.errors.append({"work_id": work_id, "error": str(outcome)})
                self.logging.error("Reindex failed for work_id=%s: %s", work_id, outcome)
            else:
                result.succeeded += 1

        self.logging.info(
            "Reindex complete: %d succeeded, %d failed of %d.", result.succeeded, result.failed, result.total
        )
        return result
