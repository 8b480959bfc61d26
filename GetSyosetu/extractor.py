import logging
from typing import Callable, Optional, TextIO

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, NavigableString, RubyParenthesisString, RubyTextString

from .exceptions import ChapterExtractionError

# ASCII blanks plus the ideographic space used for indentation in Japanese text
WHITE_SPACE = " \t\n　"
# furigana readings (<rt>, <rp>) are part of the text as well
TEXT_TYPES = (NavigableString, CData, RubyTextString, RubyParenthesisString)


def absolute_url(src: str) -> str:
    """Turns a scheme-less image src (``//host/x.jpg``) into an https URL."""
    if src.startswith('http'):
        return src
    return f"https://{src.lstrip('/')}"


def text_content(node: Tag) -> str:
    """All descendant text of node concatenated, ruby readings included."""
    return node.get_text(types=TEXT_TYPES)


class ChapterExtractor:
    """Converts one chapter page into a Markdown block."""

    def __init__(self, title_selector: str, body_selector: str,
                 resolve_image: Optional[Callable[[str], str]] = None):
        self.title_selector = title_selector
        self.body_selector = body_selector
        self.resolve_image = resolve_image
        self.logger = logging.getLogger(__name__)

    def _locate(self, soup: BeautifulSoup, selector: str) -> Tag:
        node = soup.select_one(selector)
        if not isinstance(node, Tag):
            raise ChapterExtractionError(selector)
        return node

    def _image_markdown(self, element: Tag) -> Optional[str]:
        img = element if element.name == 'img' else element.find('img')
        if not isinstance(img, Tag):
            return None
        src = img.get('src')
        if not isinstance(src, str) or not src:
            return None

        src = absolute_url(src)
        if self.resolve_image:
            src = self.resolve_image(src)
        alt = img.get('alt') or ''
        return f"![{alt}]({src})"

    def extract(self, html: str, sink: TextIO) -> None:
        """
        Writes the Markdown for a chapter page into sink.
        Both blocks are located before anything is written, so a page with the
        wrong layout leaves the sink untouched.
        """
        soup = BeautifulSoup(html, 'html.parser')
        title = self._locate(soup, self.title_selector)
        body = self._locate(soup, self.body_selector)

        sink.write(f"## {text_content(title)}\n")

        for child in body.children:
            if not isinstance(child, Tag):
                continue

            sink.write("\n")
            text = text_content(child).strip(WHITE_SPACE)
            if text:
                sink.write(text)
                continue

            image = self._image_markdown(child)
            if image:
                self.logger.debug(f"Embedding image {image}")
                sink.write(image)

        sink.write("\n\n")
