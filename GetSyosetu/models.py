from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .exceptions import InvalidInputError

NOVEL_ID_MAX_LEN = 10
UPDATED_AT_MAX_LEN = 19


@dataclass(frozen=True)
class NovelId:
    """A syosetu novel code such as ``n9185fm``."""
    value: str

    @classmethod
    def parse(cls, text: str) -> "NovelId":
        text = text.strip()
        if not text:
            raise InvalidInputError("Id cannot be empty")
        if len(text) > NOVEL_ID_MAX_LEN:
            raise InvalidInputError(f"Id cannot be more than {NOVEL_ID_MAX_LEN} characters")
        return cls(text)

    def lower(self) -> "NovelId":
        return NovelId(self.value.lower())

    def __str__(self) -> str:
        return self.value

@dataclass(frozen=True)
class ChapterRange:
    """Inclusive chapter bounds; ``end=None`` means up to the last chapter."""
    start: int = 1
    end: Optional[int] = None

    def __post_init__(self):
        if self.start < 1:
            raise InvalidInputError("Chapter cannot be zero")
        if self.end is not None:
            if self.end < 1:
                raise InvalidInputError("Chapter cannot be zero")
            if self.start > self.end:
                raise InvalidInputError(f"From '{self.start}' is above To '{self.end}'")

    def resolve_end(self, chapter_count: int) -> int:
        return self.end if self.end is not None else chapter_count

@dataclass(frozen=True)
class NovelCount:
    """The count-only record the API puts first in every response."""
    allcount: int

@dataclass(frozen=True)
class NovelInfo:
    """Represents the metadata of a novel as returned by the API."""
    title: str
    ncode: NovelId
    writer: str
    chapter_count: int
    updated_at: str

@dataclass
class DownloadRequest:
    """Everything a single run needs to know, gathered from flags or prompts."""
    novel_id: NovelId
    is_adult: bool = False
    chapter_range: ChapterRange = field(default_factory=ChapterRange)
    title: Optional[str] = None
    layout: Optional[str] = None
    max_retries: Optional[int] = None
    output_dir: str = "."

@dataclass
class DownloadReport:
    """Outcome of a chapter range download."""
    chapters: int = 0
    failed_attempts: int = 0


NovelPayload = Union[NovelCount, NovelInfo]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_payload(item: Any) -> Optional[NovelPayload]:
    """
    Reads one element of the API's JSON array.
    Returns None when the element matches neither known shape.
    """
    if not isinstance(item, dict):
        return None

    title = item.get('title')
    ncode = item.get('ncode')
    writer = item.get('writer')
    chapter_count = item.get('general_all_no')
    updated_at = item.get('novelupdated_at')
    if (
        isinstance(title, str) and isinstance(ncode, str) and isinstance(writer, str)
        and _is_int(chapter_count) and isinstance(updated_at, str)
        and 0 < len(ncode) <= NOVEL_ID_MAX_LEN and len(updated_at) <= UPDATED_AT_MAX_LEN
    ):
        return NovelInfo(
            title=title,
            ncode=NovelId(ncode).lower(),
            writer=writer,
            chapter_count=chapter_count,
            updated_at=updated_at,
        )

    if _is_int(item.get('allcount')):
        return NovelCount(allcount=item['allcount'])
    return None
