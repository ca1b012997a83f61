"""Query router: RAG answers, similar work notes and meeting-minute references."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.api.dependencies.auth import verify_api_key
from server.models.requests import MeetingMinuteSearchRequest, RagQueryRequest, SimilarNotesRequest
from server.models.responses import MeetingMinuteSearchResponse, SimilarNotesResponse

query_router = APIRouter()


@query_router.post(
    "/rag/query",
    dependencies=[Depends(verify_api_key)],
    tags=["Query"],
)
async def handle_rag_query(request: Request, body: RagQueryRequest) -> JSONResponse:
    """Answer a question from the work notes within the requested scope.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (RagQueryRequest): Question, scope and scope argument.

    Returns:
        JSONResponse: {answer, contexts} with contexts in prompt order.
    """
    request.app.state.logging.info("RAG query received: scope=%s query=%r", body.scope, body.query[:80])
    result = await request.app.state.query_service.do_query(body)
    return JSONResponse(content=result.model_dump(by_alias=True))


@query_router.post(
    "/work-notes/similar",
    dependencies=[Depends(verify_api_key)],
    tags=["Query"],
)
async def handle_similar_notes(request: Request, body: SimilarNotesRequest) -> JSONResponse:
    """Find the work notes most similar to a free text, with their open todos."""
    settings = request.app.state.config.get_retrieval_settings()
    results = await request.app.state.similarity_service.do_find_similar(
        query_text=body.query,
        top_k=body.top_k if body.top_k is not None else settings.similar_top_k,
        min_score=body.min_score if body.min_score is not None else settings.similar_min_score,
    )
    response = SimilarNotesResponse(results=results, total=len(results))
    return JSONResponse(content=response.model_dump(by_alias=True))


@query_router.post(
    "/meeting-minutes/references",
    dependencies=[Depends(verify_api_key)],
    tags=["Query"],
)
async def handle_meeting_minute_references(request: Request, body: MeetingMinuteSearchRequest) -> JSONResponse:
    results = await request.app.state.meeting_minute_service.do_search(body.query, body.limit)
    response = MeetingMinuteSearchResponse(query=body.query, results=results, total=len(results))
    return JSONResponse(content=response.model_dump(by_alias=True))
