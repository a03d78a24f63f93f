class GraphError(Exception):
    """Base class for commit graph errors."""


class NoTipsFound(GraphError):
    """No reference tips (nor HEAD) to start traversing from."""

    def __init__(self, message: str = "no commits found"):
        super().__init__(message)


class FrontierExhausted(GraphError):
    """advance() was called on a traversal with nothing left to visit."""


class LookupFailed(GraphError):
    """A commit could not be read from the history source."""

    def __init__(self, oid: str, reason: str = ""):
        self.oid = oid
        super().__init__(f"Cannot read commit {oid}" + (f": {reason}" if reason else ""))


class DiffUnavailable(GraphError):
    """Changed paths for a commit could not be computed."""

    def __init__(self, oid: str, reason: str = ""):
        self.oid = oid
        super().__init__(f"Cannot diff commit {oid}" + (f": {reason}" if reason else ""))
