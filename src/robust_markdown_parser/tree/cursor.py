"""Token cursor with lookahead, backtracking and in-place replacement."""

from typing import List, Optional

from robust_markdown_parser.shared.exceptions import ParserInvariantError
from robust_markdown_parser.tokenization import Token, TokenType


class TokenCursor:
    """Cursor over a fully materialized token list owned by the tree builder.

    The builder rewrites misclassified tokens through :meth:`overwrite`, so the
    cursor must be given a list the caller is willing to have modified.
    """

    def __init__(self, tokens: List[Token]) -> None:
        self._tokens = tokens
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> Optional[Token]:
        """Return the token at the cursor without moving."""
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def take(self) -> Optional[Token]:
        """Return the token at the cursor and advance past it."""
        token = self.current()
        if token is not None:
            self._index += 1
        return token

    def previous(self) -> Optional[Token]:
        """Return the token immediately before the cursor."""
        if self._index == 0:
            return None
        return self._tokens[self._index - 1]

    def retreat(self) -> None:
        """Move the cursor one token back."""
        if self._index == 0:
            raise ParserInvariantError("Cannot retreat before the first token")
        self._index -= 1

    def overwrite(self, token: Token) -> None:
        """Replace the token at the cursor in place."""
        if self.current() is None:
            raise ParserInvariantError(
                f"No token to overwrite at index {self._index}"
            )
        self._tokens[self._index] = token

    def peek_list_depth(self) -> Optional[int]:
        """Report the nesting depth of a list marker ahead of the cursor.

        Counts consecutive whitespace tokens from the cursor. If they are
        directly followed by a list marker, the count is the item's depth;
        any other token (or the end of input) means no list item follows.
        """
        depth = 0
        for index in range(self._index, len(self._tokens)):
            token = self._tokens[index]
            if token.type is TokenType.WHITESPACE:
                depth += 1
            elif token.type is TokenType.UNORDERED_LIST:
                return depth
            else:
                return None
        return None
