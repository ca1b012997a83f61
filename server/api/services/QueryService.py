"""Query service: answers questions about work notes from retrieved context.

Pipeline: scope filter → similarity search → bounded context assembly →
chat completion. The answer is generated even when nothing was retrieved,
so callers always get an answer field.
"""

from server.api.services.SimilarityService import SimilarityService
from server.models.requests import RagQueryRequest
from server.models.responses import RagContextSnippet, RagQueryResponse, SimilarWorkNote
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperChunking import HelperChunking
from shared.helper.HelperConfig import HelperConfig
from shared.helper.HelperScopeFilter import build_scope_filter
from shared.models.errors import ClientRequestError, GenerationUnavailable, InvalidParameters

SNIPPET_ELLIPSIS = "..."

PROMPT_TEMPLATE = """You are an assistant answering questions about work notes.

Answer the user's question using the context below.
If the context does not contain the relevant information, say so.

{context}

---

Question: {question}

Keep the answer concise and refer to specific work notes where possible."""


def truncate_snippet(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - len(SNIPPET_ELLIPSIS), 0)] + SNIPPET_ELLIPSIS


def format_context_block(position: int, context: RagContextSnippet) -> str:
    return f"[Context {position}]\nWork note: {context.title} (ID: {context.work_id})\nContent:\n{context.snippet}\n"


class QueryService:
    """Orchestrates retrieval, context assembly and answer generation."""

    def __init__(
        self,
        helper_config: HelperConfig,
        similarity_service: SimilarityService,
        llm_client: LLMClientInterface,
        chunking: HelperChunking,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._settings = helper_config.get_retrieval_settings()
        self._similarity = similarity_service
        self._llm = llm_client
        self._chunking = chunking

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_query(self, request: RagQueryRequest) -> RagQueryResponse:
        """Answer a question from the work notes within a scope.

        Args:
            request (RagQueryRequest): Question, scope and optional top_k override.

        Returns:
            RagQueryResponse: The generated answer and the contexts used for it,
                in the order they appear in the prompt.

        Raises:
            InvalidScopeParameters: If the scope is unknown or incomplete.
            InvalidParameters: If top_k <= 0.
            EmbeddingUnavailable: If the question could not be embedded.
            GenerationUnavailable: If the chat provider failed.
        """
        scope_filter = build_scope_filter(
            request.scope,
            person_id=request.person_id,
            dept_name=request.dept_name,
            work_id=request.work_id,
            project_id=request.project_id,
        )
        top_k = request.top_k if request.top_k is not None else self._settings.top_k
        self.logging.info(
            "Executing RAG query: scope=%s top_k=%d query=%r",
            request.scope or "global", top_k, request.query[:80],
        )

        notes = await self._similarity.do_find_similar(
            query_text=request.query,
            top_k=top_k,
            min_score=self._settings.min_score,
            scope_filter=scope_filter,
            with_tasks=False,
        )
        contexts = self._build_contexts(notes)
        prompt = self.build_prompt(request.query, contexts)

        answer = await self._generate(prompt)
        self.logging.info("RAG query complete: retrieved=%d contexts=%d", len(notes), len(contexts))
        return RagQueryResponse(answer=answer, contexts=contexts)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_snippet(self, note: SimilarWorkNote) -> str:
        try:
            text = self._chunking.get_document_chunk_text(note.title, note.content, note.chunk_index)
        except InvalidParameters:
            # work note got shorter since it was indexed
            text = self._chunking.get_document_chunk_text(note.title, note.content, 0)
        return truncate_snippet(text, self._settings.snippet_max_chars)

    def _build_contexts(self, notes: list[SimilarWorkNote]) -> list[RagContextSnippet]:
        """Turn retrieved notes into contexts until the context budget is used up.

        Notes are taken whole in the given order; the first one that does not
        fit ends the assembly.
        """
        contexts: list[RagContextSnippet] = []
        used_chars = 0
        for note in notes:
            context = RagContextSnippet(
                work_id=note.work_id,
                title=note.title,
                snippet=self._build_snippet(note),
                score=note.similarity_score,
            )
            block_len = len(format_context_block(len(contexts) + 1, context))
            if used_chars + block_len > self._settings.max_context_chars:
                self.logging.debug(
                    "Context budget reached: kept=%d dropped=%d", len(contexts), len(notes) - len(contexts)
                )
                break
            contexts.append(context)
            used_chars += block_len
        return contexts

    def build_prompt(self, question: str, contexts: list[RagContextSnippet]) -> str:
        context_text = "\n---\n".join(
            format_context_block(position, context) for position, context in enumerate(contexts, start=1)
        )
        return PROMPT_TEMPLATE.format(context=context_text, question=question)

    async def _generate(self, prompt: str) -> str:
        try:
            return await self._llm.do_complete(prompt)
        except ClientRequestError as exc:
            self.logging.error("Chat completion request failed with status %d.", exc.status_code)
            raise GenerationUnavailable(f"Generation provider failed: {exc}", rate_limited=exc.status_code == 429) from exc
        except Exception as exc:
            self.logging.error("Chat completion failed: %s", exc)
            raise GenerationUnavailable(f"Generation provider failed: {exc}") from exc
