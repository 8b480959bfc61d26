from typing import Optional


class NovelError(Exception):
    """Base exception for novel processing errors."""
    pass

class InvalidInputError(NovelError):
    """Raised when a novel id, chapter bound or setting is not acceptable."""
    pass

class MetadataError(NovelError):
    """Raised when novel metadata cannot be fetched from the API."""

    STATUS = "status"
    UNREACHABLE = "unreachable"
    INVALID_JSON = "invalid_json"
    NOT_FOUND = "not_found"

    def __init__(self, message: str, reason: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.reason = reason
        self.status_code = status_code

class ChapterDownloadError(NovelError):
    """Raised when a chapter cannot be downloaded within the retry limit."""
    pass

class ChapterExtractionError(NovelError):
    """Raised when a chapter page lacks the title or body block."""

    def __init__(self, selector: str):
        super().__init__(f"Unable to find {selector} block")
        self.selector = selector

class OutputError(NovelError):
    """Raised when the Markdown output file cannot be created or written."""
    pass
