"""Exception types for robust Markdown parsing.

Malformed markup never raises; these exceptions signal programming errors
inside the parser itself.
"""


class ParserInvariantError(RuntimeError):
    """Raised when an internal precondition of the parser is violated."""
