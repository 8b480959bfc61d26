import os
import re
import logging
from typing import Optional, TextIO

from .config import Settings
from .scraper import Scraper
from .extractor import ChapterExtractor
from .models import DownloadRequest, NovelInfo
from .exceptions import InvalidInputError, NovelError, OutputError
from .chapter_manager import ChapterManager


def safe_filename(name: str) -> str:
    cleaned = re.sub(r'[\\/:*?"<>|]+', '_', name).strip(' .')
    return cleaned or 'novel'


class NovelManager:
    """Orchestrates the entire process of downloading a novel into Markdown."""

    def __init__(self, settings: Optional[Settings] = None, scraper: Optional[Scraper] = None):
        self.settings = settings or Settings()
        self.scraper = scraper or Scraper(self.settings)
        title_selector, body_selector = self.settings.selectors
        self.extractor = ChapterExtractor(title_selector, body_selector, self.scraper.resolve_redirect)
        self.chapter_manager = ChapterManager(self.scraper, self.extractor, self.settings)
        self.logger = logging.getLogger(__name__)

    def _print_summary(self, novel: NovelInfo):
        print("## Novel: ")
        print(f"Title={novel.title}")
        print(f"Code={novel.ncode}")
        print(f"Author={novel.writer}")
        print(f"Chapter Number={novel.chapter_count}")
        print(f"Last Updated={novel.updated_at}", flush=True)

    def _open_output(self, output_dir: str, title: str) -> TextIO:
        path = os.path.join(output_dir, f"{safe_filename(title)}.md")
        try:
            return open(path, 'w', encoding='utf-8')
        except OSError as e:
            raise OutputError(f"Failed to create file to store content. Error: {e}") from e

    def download(self, request: DownloadRequest) -> str:
        """
        Downloads the requested chapters and returns the path of the Markdown file.
        Raises NovelError subclasses on any fatal problem.
        """
        novel = self.scraper.get_novel_info(request.novel_id, request.is_adult)
        self._print_summary(novel)

        chapter_range = request.chapter_range
        if chapter_range.start > novel.chapter_count:
            raise InvalidInputError(
                f"From is '{chapter_range.start}' but novel has only {novel.chapter_count} chapters"
            )

        title = request.title or novel.title
        novel_url = self.scraper.novel_url(novel.ncode, request.is_adult)
        with self._open_output(request.output_dir, title) as output:
            try:
                output.write(f"# {title}\n\nOriginal: {novel_url}\n\n")
                self.chapter_manager.download_range(novel, chapter_range, request.is_adult, output)
                output.flush()
            except OSError as e:
                raise OutputError(f"Unable to write file: {e}") from e
            return output.name

    def process_novel(self, request: DownloadRequest) -> int:
        """Main method to process a novel; returns the process exit code."""
        try:
            path = self.download(request)
        except NovelError as e:
            self.logger.error(f"Could not process novel: {e}")
            return 1
        except OSError as e:
            self.logger.error(f"An unexpected I/O error occurred: {e}")
            return 1

        self.logger.info(f"Novel saved to {path}")
        return 0
