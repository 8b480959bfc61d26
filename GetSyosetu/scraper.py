import logging
from typing import Optional

import requests

from .config import AGE_GATE_COOKIE, API_URL, COOKIE_DOMAIN, SITE_URL, Settings, api_endpoint, host_prefix
from .exceptions import MetadataError
from .models import NovelId, NovelInfo, parse_payload


class Scraper:
    """Handles all HTTP traffic with syosetu.com."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': self.settings.user_agent})
        for name, value in AGE_GATE_COOKIE.items():
            self.session.cookies.set(name, value, domain=COOKIE_DOMAIN)
        self.logger = logging.getLogger(__name__)

    def novel_url(self, ncode: NovelId, is_adult: bool) -> str:
        host = SITE_URL.format(host=host_prefix(is_adult))
        return f"{host}/{ncode}"

    def chapter_url(self, ncode: NovelId, is_adult: bool, index: int) -> str:
        return f"{self.novel_url(ncode, is_adult)}/{index}"

    def get_novel_info(self, novel_id: NovelId, is_adult: bool) -> NovelInfo:
        """Queries the novel API and returns the metadata of a single novel."""
        url = API_URL.format(endpoint=api_endpoint(is_adult))
        try:
            response = self.session.get(
                url, params={'out': 'json', 'ncode': str(novel_id)}, timeout=self.settings.timeout
            )
        except requests.exceptions.RequestException as e:
            raise MetadataError(f"api.syosetu.com is unreachable: {e}", MetadataError.UNREACHABLE) from e

        if response.status_code != 200:
            raise MetadataError(
                f"Request to api.syosetu.com failed with code: {response.status_code}",
                MetadataError.STATUS,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            self.logger.debug(f"JSON:\n{response.text}")
            raise MetadataError(
                f"Failed to get novel '{novel_id}' info. Invalid JSON: {e}", MetadataError.INVALID_JSON
            ) from e
        if not isinstance(data, list):
            raise MetadataError(
                f"Failed to get novel '{novel_id}' info. Invalid JSON: expected an array",
                MetadataError.INVALID_JSON,
            )

        # The first element is always the count record; the novel itself comes last.
        payload = parse_payload(data[-1]) if data else None
        if not isinstance(payload, NovelInfo):
            raise MetadataError(f"Novel '{novel_id}' is not found", MetadataError.NOT_FOUND)
        return payload

    def get_chapter_html(self, url: str) -> str:
        """
        Fetches a chapter page.
        Raises requests.exceptions.RequestException on transport errors and on
        any status other than 200.
        """
        response = self.session.get(url, timeout=self.settings.timeout)
        if response.status_code != 200:
            raise requests.exceptions.HTTPError(
                f"Request to {url} failed with code: {response.status_code}", response=response
            )
        if 'charset' not in response.headers.get('Content-Type', '').lower():
            response.encoding = 'utf-8'
        return response.text

    def resolve_redirect(self, url: str) -> str:
        """Follows a single redirect hop of an image URL; falls back to the URL itself."""
        try:
            response = self.session.head(url, allow_redirects=False, timeout=self.settings.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.debug(f"Could not resolve {url}: {e}")
            return url

        location = response.headers.get('Location')
        if 300 <= response.status_code <= 399 and isinstance(location, str) and location:
            return location
        return url
