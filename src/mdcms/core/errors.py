"""Exceptions raised by the content engine"""


class ContentError(Exception):
    """Base class for all content engine errors."""


class FrontmatterMissing(ContentError, ValueError):
    """Raised when a document does not open with a `---` delimited block.

    Attributes:
        source: Optional label (usually a file path) for the offending document
    """

    def __init__(self, message: str = "No frontmatter block found", source: str | None = None):
        self.source = source
        self.message = message
        super().__init__(f"{message}: {source}" if source else message)


class NotFound(ContentError, LookupError):
    """Raised when a mutation or lookup targets a page, block or segment that does not exist."""

    def __init__(self, kind: str, id: str):
        self.kind = kind
        self.id = id
        super().__init__(f"{kind} not found: {id}")


class VersionConflict(ContentError):
    """Raised when an optimistic version check fails on a page update."""

    def __init__(self, page_id: str, expected: int, actual: int):
        self.page_id = page_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Page {page_id} is at version {actual}, expected {expected}")


class ScanCancelled(ContentError):
    """Raised when a corpus scan is aborted through its cancel event."""


class StoreNotLoaded(ContentError, RuntimeError):
    """Raised when a PageStore is used before load() was called."""
