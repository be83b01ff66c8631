"""Tracks the single folder currently expanded in the result list."""
from typing import Optional


class FolderExpansionState:
    """At most one folder is expanded; expanding another collapses the first."""

    def __init__(self) -> None:
        self.expanded_id: Optional[str] = None

    def toggle(self, folder_id: str) -> Optional[str]:
        """Collapse folder_id if it is expanded, otherwise expand it.

        Returns:
            The expanded folder id after the toggle, or None
        """
        if self.expanded_id == folder_id:
            self.expanded_id = None
        else:
            self.expanded_id = folder_id
        return self.expanded_id

    def is_expanded(self, folder_id: str) -> bool:
        return self.expanded_id is not None and self.expanded_id == folder_id

    def reset(self) -> None:
        self.expanded_id = None
