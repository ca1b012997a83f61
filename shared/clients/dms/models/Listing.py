"""Paged listing response returned by a document store client."""

from pydantic import BaseModel


class ListingPage(BaseModel):
    """
    One page of a paginated listing.

    Attributes:
        items:        Raw item dicts of this page, parsed by the engine client.
        currentPage:  The page number of this response.
        nextPage:     The next page number, or None on the last page.
        overallCount: Total number of items across all pages, if known.
        lastPage:     Number of the last page, if known.
    """

    items: list[dict] = []
    currentPage: int
    nextPage: int | None = None
    overallCount: int | None = None
    lastPage: int | None = None
