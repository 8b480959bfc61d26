import logging
import time
from typing import Optional, TextIO

import requests

from .config import Settings
from .exceptions import ChapterDownloadError, InvalidInputError
from .extractor import ChapterExtractor
from .models import ChapterRange, DownloadReport, NovelInfo
from .scraper import Scraper


class ChapterManager:
    """Downloads a range of chapters one by one and appends them as Markdown."""

    def __init__(self, scraper: Scraper, extractor: ChapterExtractor, settings: Optional[Settings] = None):
        self.scraper = scraper
        self.extractor = extractor
        self.settings = settings or scraper.settings
        self.logger = logging.getLogger(__name__)

    def resolve_bounds(self, novel: NovelInfo, chapter_range: ChapterRange) -> range:
        """Checks the requested range against the novel and returns the indices to fetch."""
        if chapter_range.start > novel.chapter_count:
            raise InvalidInputError(
                f"From is '{chapter_range.start}' but novel has only {novel.chapter_count} chapters"
            )

        end = chapter_range.resolve_end(novel.chapter_count)
        if end > novel.chapter_count:
            self.logger.warning(f"To is '{end}' but novel has only {novel.chapter_count} chapters")
        elif chapter_range.start > end:
            raise InvalidInputError(f"From '{chapter_range.start}' is above To '{end}'")
        return range(chapter_range.start, end + 1)

    def _fetch_with_retry(self, url: str, index: int) -> tuple[str, int]:
        failures = 0
        max_retries = self.settings.max_retries
        while True:
            try:
                return self.scraper.get_chapter_html(url), failures
            except requests.exceptions.RequestException as e:
                failures += 1
                print("ERR", flush=True)
                self.logger.error(f"Chapter {index} attempt {failures} failed: {e}")

            if max_retries is not None and failures > max_retries:
                raise ChapterDownloadError(
                    f"Failed to download chapter {index} after {failures} attempts"
                )
            time.sleep(self.settings.retry_delay)
            print(f"Retrying chapter {index}...", end="", flush=True)

    def download_chapter(self, novel: NovelInfo, index: int, is_adult: bool, sink: TextIO) -> int:
        """Fetches one chapter, writes it into sink and returns the failed attempt count."""
        url = self.scraper.chapter_url(novel.ncode, is_adult, index)
        print(f"Downloading chapter {index} ({novel.ncode}/{index})...", end="", flush=True)

        html, failures = self._fetch_with_retry(url, index)
        try:
            self.extractor.extract(html, sink)
        except Exception:
            print("ERR", flush=True)
            raise

        print("OK", flush=True)
        if failures:
            self.logger.info(f"Chapter {index} downloaded after {failures} failed attempts")
        return failures

    def download_range(self, novel: NovelInfo, chapter_range: ChapterRange, is_adult: bool,
                       sink: TextIO) -> DownloadReport:
        indices = self.resolve_bounds(novel, chapter_range)
        report = DownloadReport()
        for index in indices:
            report.failed_attempts += self.download_chapter(novel, index, is_adult, sink)
            report.chapters += 1

        self.logger.info(
            f"Downloaded {report.chapters} chapters with {report.failed_attempts} failed attempts"
        )
        return report
