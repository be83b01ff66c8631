"""Builds the flattened result list shown in the popup.

Stages run in a fixed order:
  1. read click history (used for the empty query and for row annotation)
  2. search the bookmark tree
  3. rank hits by relevance when scoring is enabled and folders are not shown
  4. put folders first and inline the children of the expanded folder
  5. cap bookmark hits at the result limit

Row indexes are assigned purely by emission order, so the returned list is
the single source of truth for navigation.
"""
from typing import Dict, List, Optional

from quickmarks.bookmark_tree import BookmarkTree
from quickmarks.config import RankingConfig
from quickmarks.history import KeyValueStore, load_history, index_by_url
from quickmarks.models import BookmarkNode, BookmarkRow, FolderRow, HistoryEntry, ResultList
from quickmarks.scoring import RelevanceScorer, ScoringEngine, rank


class ResultComposer:
    """Turns a query plus history plus the bookmark tree into result rows."""

    def __init__(
        self,
        tree: BookmarkTree,
        history_store: KeyValueStore,
        ranking: Optional[RankingConfig] = None,
        scorer: Optional[ScoringEngine] = None,
    ):
        self.tree = tree
        self.history_store = history_store
        self.ranking = ranking or RankingConfig()
        self.scorer = scorer or RelevanceScorer()

    async def compose(
        self,
        query: str,
        expanded_id: Optional[str] = None,
        include_folders: bool = False,
    ) -> ResultList:
        """Compose the result list for the popup.

        Args:
            query: Raw search box text
            expanded_id: Id of the expanded folder, if any
            include_folders: Whether folder hits are shown

        Returns:
            Flattened rows in display order
        """
        history = await load_history(self.history_store)

        if not query.strip():
            return await self._history_rows(history)

        lookup = index_by_url(history) if self.ranking.personalize else {}
        hits = await self.tree.search(query)
        folders = [node for node in hits if node.is_folder]
        bookmarks = [node for node in hits if not node.is_folder]
        limit = self.ranking.result_limit

        if not include_folders:
            if self.ranking.scoring_enabled:
                bookmarks = rank(bookmarks, query, limit=limit, engine=self.scorer)
            return [self._bookmark_row(node, lookup) for node in bookmarks[:limit]]

        rows: ResultList = []
        for folder in folders:
            rows.extend(await self._folder_rows(folder, expanded_id, lookup))
        rows.extend(self._bookmark_row(node, lookup) for node in bookmarks[:limit])
        return rows

    async def _history_rows(self, history: List[HistoryEntry]) -> ResultList:
        if history:
            return [BookmarkRow(entry.to_node(), entry) for entry in history]

        if self.ranking.recent_fallback:
            recent = await self.tree.get_recent(self.ranking.result_limit)
            return [BookmarkRow(node) for node in recent if not node.is_folder]

        return []

    async def _folder_rows(
        self,
        folder: BookmarkNode,
        expanded_id: Optional[str],
        lookup: Dict[str, HistoryEntry],
    ) -> ResultList:
        """Rows for one folder hit, followed by its children when expanded."""
        expanded = expanded_id is not None and folder.id == expanded_id
        rows: ResultList = [FolderRow(folder, is_expanded=expanded)]

        if expanded:
            for child in await self.tree.get_children(folder.id):
                if child.is_folder:
                    rows.append(FolderRow(child, is_expanded=False))
                else:
                    rows.append(self._bookmark_row(child, lookup))

        return rows

    @staticmethod
    def _bookmark_row(node: BookmarkNode, lookup: Dict[str, HistoryEntry]) -> BookmarkRow:
        return BookmarkRow(node, lookup.get(node.url))
