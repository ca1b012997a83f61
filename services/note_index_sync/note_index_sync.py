"""Index runner entry point.

Rebuilds the vector index from all work notes of the document store.
Run directly for a one-shot full reindex; single work notes are kept
current by the webhook handler.

Usage:
    python -m services.note_index_sync.note_index_sync
"""

import asyncio
import sys

from services.note_index_sync.IndexService import IndexService
from shared.clients.dms.DMSClientManager import DMSClientManager
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.helper.HelperChunking import HelperChunking
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


async def main() -> int:
    """Run the full reindex. Returns the process exit code."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    settings = config.get_retrieval_settings()

    # init clients
    dms_client = DMSClientManager(helper_config=config).get_client()
    rag_client = RAGClientManager(helper_config=config).get_client()
    embed_client = EmbedClientManager(helper_config=config).get_client()

    try:
        # all three clients are required, there is no point in indexing without any of them
        for client in (embed_client, dms_client, rag_client):
            try:
                await client.boot()
                await client.do_healthcheck()
            except Exception as e:
                logger.error("Error booting %s client %s: %s. Aborting.", client.get_client_type(), client.get_engine_name(), e)
                return 1

        # create the collection, if not already existing
        if not await rag_client.do_existence_check():
            await rag_client.do_create_collection(vector_size=embed_client.get_vector_size(), distance=embed_client.embed_distance)

        index_service = IndexService(
            helper_config=config,
            dms_client=dms_client,
            rag_client=rag_client,
            embed_client=embed_client,
            chunking=HelperChunking(chunk_size_tokens=settings.chunk_size_tokens),
        )
        result = await index_service.do_reindex_all()
        if result.failed:
            logger.warning("Reindex finished with %d of %d work notes failing.", result.failed, result.total)
            return 2
        logger.info("Reindex finished: %d work notes indexed.", result.succeeded, color="green")
        return 0
    finally:
        for client in (embed_client, dms_client, rag_client):
            await client.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
