"""Character cursor over an immutable text buffer.

The cursor walks decoded characters rather than bytes, so multi-byte UTF-8
characters always move the offset by exactly one position.
"""

from typing import Optional

# Characters that end a free-text run besides whitespace
RUN_TERMINATORS = frozenset("*")


class CharCursor:
    """Forward/backward cursor over a text buffer used by the tokenizer."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0

    @property
    def offset(self) -> int:
        """Current character offset into the buffer."""
        return self._offset

    @property
    def at_end(self) -> bool:
        return self._offset >= len(self._text)

    def peek(self) -> Optional[str]:
        """Return the character at the current offset without advancing."""
        if self.at_end:
            return None
        return self._text[self._offset]

    def advance(self) -> Optional[str]:
        """Return the character at the current offset and move past it."""
        char = self.peek()
        if char is not None:
            self._offset += 1
        return char

    def look_back(self, n: int) -> Optional[str]:
        """Return the character ``n`` positions before the current offset.

        ``look_back(1)`` is the character most recently returned by
        :meth:`advance`.

        Raises:
            ValueError: If ``n`` is smaller than 1
        """
        if n < 1:
            raise ValueError(f"look_back distance must be >= 1, got {n}")
        if self._offset < n:
            return None
        return self._text[self._offset - n]

    def consume_run(self) -> str:
        """Consume a free-text run starting at the character just advanced.

        The run ends before the next whitespace character, newline or ``*``,
        which is left unconsumed for the caller to classify. A run may not
        start on a separator: if the character just advanced is whitespace,
        nothing is consumed and an empty string is returned.
        """
        previous = self.look_back(1)
        if previous is not None and previous.isspace():
            return ""

        start = self._offset - 1 if previous is not None else self._offset
        while True:
            char = self.advance()
            if char is None:
                break
            if char.isspace() or char in RUN_TERMINATORS:
                # Un-consume the terminator
                self._offset -= 1
                break
        return self._text[start:self._offset]
