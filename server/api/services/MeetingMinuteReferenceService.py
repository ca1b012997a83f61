"""Meeting-minute reference search.

Ranks the meeting-minute corpus by token overlap with a query, without
embeddings. A query token found in the keyword list scores 3, a token found
in topic or details scores 1; both can apply to the same token.
"""

import re

from server.models.responses import MeetingMinuteReference
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import MeetingMinute

KEYWORD_WEIGHT = 3
TEXT_WEIGHT = 1
MAX_KEYWORDS = 10

_TOKEN_PATTERN = re.compile(r"[^\W_]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def tokenize(text: str | None) -> list[str]:
    """Lowercase word tokens of a text, unique and in order of first appearance.

    Punctuation and underscores separate tokens and never form one, so a
    punctuation-only text yields no tokens.
    """
    if not text:
        return []
    return list(dict.fromkeys(_TOKEN_PATTERN.findall(text.lower())))


def normalize_keywords(raw: list[str] | None) -> list[str]:
    """Clean up a keyword list: strip leading '#', collapse whitespace,
    lowercase, drop empties and duplicates, keep at most MAX_KEYWORDS."""
    normalized: list[str] = []
    for keyword in raw or []:
        if not isinstance(keyword, str):
            continue
        cleaned = _WHITESPACE_PATTERN.sub(" ", keyword.strip().lstrip("#")).strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
        if len(normalized) >= MAX_KEYWORDS:
            break
    return normalized


def score_meeting_minute(query_tokens: list[str], minute: MeetingMinute) -> int:
    """Relevance of one meeting minute for the given (distinct) query tokens."""
    keyword_tokens = {token for keyword in normalize_keywords(minute.keywords) for token in tokenize(keyword)}
    text_tokens = set(tokenize(minute.topic)) | set(tokenize(minute.details))

    score = 0
    for token in query_tokens:
        if token in keyword_tokens:
            score += KEYWORD_WEIGHT
        if token in text_tokens:
            score += TEXT_WEIGHT
    return score


def rank_meeting_minutes(corpus: list[MeetingMinute], query: str, limit: int) -> list[MeetingMinuteReference]:
    """Rank a corpus against a query.

    Args:
        corpus (list[MeetingMinute]): Entries in corpus order.
        query (str): Free-text query.
        limit (int): Maximum number of results.

    Returns:
        list[MeetingMinuteReference]: Entries with a positive score, best first.
            Equal scores keep corpus order. Empty for limit <= 0 or a query
            without tokens.
    """
    query_tokens = tokenize(query)
    if limit <= 0 or not query_tokens:
        return []

    scored: list[tuple[int, MeetingMinute]] = []
    for minute in corpus:
        score = score_meeting_minute(query_tokens, minute)
        if score > 0:
            scored.append((score, minute))
    scored.sort(key=lambda item: item[0], reverse=True)

    return [
        MeetingMinuteReference(
            meeting_id=minute.meeting_id,
            meeting_date=minute.meeting_date,
            topic=minute.topic,
            keywords=normalize_keywords(minute.keywords),
            score=float(score),
        )
        for score, minute in scored[:limit]
    ]


class MeetingMinuteReferenceService:
    """Lexical search over the meeting minutes of the document store."""

    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._dms = dms_client

    async def do_search(self, query: str, limit: int) -> list[MeetingMinuteReference]:
        if limit <= 0 or not tokenize(query):
            self.logging.debug("Meeting-minute search skipped: limit=%d query=%r", limit, query[:80])
            return []

        corpus = await self._dms.do_fetch_meeting_minutes()
        references = rank_meeting_minutes(corpus, query, limit)
        self.logging.info(
            "Meeting-minute search complete: corpus=%d returned=%d query=%r",
            len(corpus), len(references), query[:80],
        )
        return references
