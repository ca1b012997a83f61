"""FastAPI application entry point for the work-note retrieval API."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
from server.api.error_handlers import register_exception_handlers
from server.api.routers.QueryRouter import query_router
from server.api.routers.WebhookRouter import webhook_router
from server.api.services.MeetingMinuteReferenceService import MeetingMinuteReferenceService
from server.api.services.QueryService import QueryService
from server.api.services.SimilarityService import SimilarityService
from services.note_index_sync.IndexService import IndexService
from shared.clients.dms.DMSClientManager import DMSClientManager
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.helper.HelperChunking import HelperChunking
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = setup_logging()
    app.state.config = HelperConfig(logger=app.state.logging)
    settings = app.state.config.get_retrieval_settings()

    # Initialise clients
    dms_client = DMSClientManager(helper_config=app.state.config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.config).get_client()
    embed_client = EmbedClientManager(helper_config=app.state.config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.config).get_client()
    clients = (dms_client, rag_client, embed_client, llm_client)
    for client in clients:
        await client.boot()

    # Health checks
    await dms_client.do_healthcheck()
    await rag_client.do_healthcheck()

    # Ensure the vector collection exists
    if not await rag_client.do_existence_check():
        await rag_client.do_create_collection(vector_size=embed_client.get_vector_size(), distance=embed_client.embed_distance)
    else:
        app.state.logging.info("%s collection already exists.", rag_client.get_engine_name())

    # Wire up services
    chunking = HelperChunking(chunk_size_tokens=settings.chunk_size_tokens)
    app.state.similarity_service = SimilarityService(
        helper_config=app.state.config,
        rag_client=rag_client,
        embed_client=embed_client,
        dms_client=dms_client,
    )
    app.state.query_service = QueryService(
        helper_config=app.state.config,
        similarity_service=app.state.similarity_service,
        llm_client=llm_client,
        chunking=chunking,
    )
    app.state.meeting_minute_service = MeetingMinuteReferenceService(
        helper_config=app.state.config,
        dms_client=dms_client,
    )
    app.state.index_service = IndexService(
        helper_config=app.state.config,
        dms_client=dms_client,
        rag_client=rag_client,
        embed_client=embed_client,
        chunking=chunking,
    )

    app.state.logging.info("Work-note retrieval API ready.", color="green")
    yield

    # Shutdown
    for client in clients:
        await client.close()
    app.state.logging.info("Work-note retrieval API shut down.")


app = FastAPI(
    title="Work-Note Retrieval Bridge",
    description="Retrieval and question answering over work notes and meeting minutes.",
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(webhook_router)
app.include_router(query_router)


# Server Start
if __name__ == "__main__":
    # start server
    import uvicorn
    logging.info(f"Starting work-note retrieval API v{app_version} from root dir: {os.getenv('ROOT_DIR', os.getcwd())} on port 8000...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
