"""Keyboard and pointer driven selection over the current result list."""
from enum import Enum

NO_SELECTION = -1


class KeyOutcome(str, Enum):
    MOVED = "moved"
    ACTIVATE = "activate"
    CLOSE = "close"
    IGNORED = "ignored"


class SelectionController:
    """Single-selection cursor with wraparound navigation.

    The cursor is either NO_SELECTION (empty list) or an index in [0, count).
    While the keyboard is driving, pointer hovers are ignored until the pointer
    leaves a row, so a list re-rendering under a still mouse does not steal
    the selection.
    """

    def __init__(self) -> None:
        self.index = NO_SELECTION
        self.count = 0
        self.keyboard_navigation = False

    def reset(self, count: int) -> int:
        """Re-anchor after a fresh composition of `count` rows."""
        self.count = max(count, 0)
        self.index = 0 if self.count > 0 else NO_SELECTION
        return self.index

    def move_down(self) -> int:
        if self.count == 0:
            return self.index
        self.keyboard_navigation = True
        self.index = (self.index + 1) % self.count
        return self.index

    def move_up(self) -> int:
        if self.count == 0:
            return self.index
        self.keyboard_navigation = True
        if self.index < 0:
            self.index = self.count - 1
        else:
            self.index = (self.index - 1 + self.count) % self.count
        return self.index

    def hover(self, index: int) -> int:
        """Select the row under the pointer, unless the keyboard is driving."""
        if not self.keyboard_navigation and 0 <= index < self.count:
            self.index = index
        return self.index

    def pointer_left(self) -> None:
        self.keyboard_navigation = False

    def handle_key(self, key: str) -> KeyOutcome:
        """Apply a key press.

        Args:
            key: DOM-style key name ("ArrowDown", "ArrowUp", "Enter", "Escape")

        Returns:
            What the caller should do next
        """
        if key == "Escape":
            return KeyOutcome.CLOSE
        if self.count == 0:
            return KeyOutcome.IGNORED

        if key == "ArrowDown":
            self.move_down()
            return KeyOutcome.MOVED
        if key == "ArrowUp":
            self.move_up()
            return KeyOutcome.MOVED
        if key == "Enter":
            if 0 <= self.index < self.count:
                return KeyOutcome.ACTIVATE
            return KeyOutcome.IGNORED

        return KeyOutcome.IGNORED
