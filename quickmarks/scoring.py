"""Relevance scoring for bookmark search results."""
from typing import List, Optional, Protocol, Sequence

from quickmarks.models import BookmarkNode


class ScoringEngine(Protocol):
    """Protocol for scorers to allow swapping the ranking function."""

    def score(self, bookmark: BookmarkNode, query: str) -> float:
        """Score a bookmark against an already lower-cased query.

        Args:
            bookmark: Bookmark to score
            query: Lower-cased query string

        Returns:
            Relevance score, higher is better
        """
        ...


class RelevanceScorer:
    """Title/url substring scorer with a multi-keyword bonus and length penalty."""

    EXACT_TITLE = 100
    TITLE_PREFIX = 50
    TITLE_CONTAINS = 30
    URL_CONTAINS = 20
    KEYWORD_BONUS = 25

    def score(self, bookmark: BookmarkNode, query: str) -> float:
        """Score a bookmark.

        Titles of 1000 characters or more turn the length factor
        non-positive, so such bookmarks can score below zero.

        Args:
            bookmark: Bookmark to score
            query: Lower-cased query string

        Returns:
            Relevance score
        """
        title = (bookmark.title or "").lower()
        url = (bookmark.url or "").lower()
        score = 0.0

        if title == query:
            score += self.EXACT_TITLE
        elif title.startswith(query):
            score += self.TITLE_PREFIX
        elif query in title:
            score += self.TITLE_CONTAINS

        if query in url:
            score += self.URL_CONTAINS

        keywords = query.split()
        if len(keywords) > 1:
            matched = sum(1 for kw in keywords if kw in title or kw in url)
            score += (matched / len(keywords)) * self.KEYWORD_BONUS

        score *= 1 - len(title) / 1000
        return score


def rank(
    bookmarks: Sequence[BookmarkNode],
    query: str,
    limit: int = 100,
    engine: Optional[ScoringEngine] = None,
) -> List[BookmarkNode]:
    """Sort bookmarks by score (descending) and keep the top `limit`.

    Equal scores keep the order the bookmarks were given in.

    Args:
        bookmarks: Bookmarks in external search order
        query: Raw query string (trimmed and lower-cased here)
        limit: Maximum number of results to return
        engine: Scorer to use, defaults to RelevanceScorer

    Returns:
        Ranked bookmarks
    """
    engine = engine or RelevanceScorer()
    lowered = query.strip().lower()

    scored = [(engine.score(b, lowered), b) for b in bookmarks]
    # list.sort is stable, so ties stay in search order
    scored.sort(key=lambda x: x[0], reverse=True)

    return [bookmark for _, bookmark in scored[:limit]]
