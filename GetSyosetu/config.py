import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from .exceptions import InvalidInputError

API_URL = "https://api.syosetu.com/{endpoint}/api/"
SITE_URL = "https://{host}.syosetu.com"
AGE_GATE_COOKIE = {'over18': 'yes'}
COOKIE_DOMAIN = '.syosetu.com'

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
)
DEFAULT_LAYOUT = 'current'

# (title selector, body selector) per page layout
LAYOUTS: Dict[str, Tuple[str, str]] = {
    'current': (
        '.p-novel__title',
        '.p-novel__text:not(.p-novel__text--preface):not(.p-novel__text--afterword)',
    ),
    'legacy': ('.novel_subtitle', '#novel_honbun'),
}


def api_endpoint(is_adult: bool) -> str:
    return 'novel18api' if is_adult else 'novelapi'


def host_prefix(is_adult: bool) -> str:
    return 'novel18' if is_adult else 'ncode'


@dataclass
class Settings:
    """Network and layout knobs shared by the scraper and the chapter manager."""
    timeout: float = 5
    retry_delay: float = 1.0
    max_retries: Optional[int] = None
    layout: str = DEFAULT_LAYOUT
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def selectors(self) -> Tuple[str, str]:
        try:
            return LAYOUTS[self.layout]
        except KeyError:
            raise InvalidInputError(
                f"Unknown layout '{self.layout}', expected one of: {', '.join(LAYOUTS)}"
            ) from None


def _env_number(name: str, convert, minimum):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = convert(raw.strip())
    except ValueError:
        raise InvalidInputError(f"{name}='{raw}' is not a number") from None
    if value < minimum:
        raise InvalidInputError(f"{name} cannot be less than {minimum}")
    return value


def load_settings() -> Settings:
    """Builds Settings from the environment, reading a .env file if present."""
    load_dotenv()
    settings = Settings()

    timeout = _env_number('SYOSETU_TIMEOUT', float, 0.1)
    if timeout is not None:
        settings.timeout = timeout
    retry_delay = _env_number('SYOSETU_RETRY_DELAY', float, 0)
    if retry_delay is not None:
        settings.retry_delay = retry_delay
    settings.max_retries = _env_number('SYOSETU_MAX_RETRIES', int, 0)

    layout = os.getenv('SYOSETU_LAYOUT')
    if layout:
        settings.layout = layout.strip()
        if settings.layout not in LAYOUTS:
            raise InvalidInputError(f"SYOSETU_LAYOUT='{layout}' is not a known layout")
    user_agent = os.getenv('SYOSETU_USER_AGENT')
    if user_agent:
        settings.user_agent = user_agent
    return settings
