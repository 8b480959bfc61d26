import argparse
import logging
import sys
from typing import List, Optional

from .config import LAYOUTS, Settings, load_settings
from .exceptions import InvalidInputError
from .manager import NovelManager
from .models import ChapterRange, DownloadRequest, NovelId

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not a number")
    if value < 1:
        raise argparse.ArgumentTypeError("Chapter cannot be zero")
    return value


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not a number")
    if value < 0:
        raise argparse.ArgumentTypeError("Retry count cannot be negative")
    return value


def _novel_id(text: str) -> NovelId:
    try:
        return NovelId.parse(text)
    except InvalidInputError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="getsyosetu", description="Utility to download text of the syosetu novels as Markdown."
    )
    parser.add_argument("--from", dest="start", type=_positive_int, default=1,
                        help="Specify from which chapter to start dumping. Default: 1.")
    parser.add_argument("--to", dest="end", type=_positive_int,
                        help="Specify until which chapter to dump.")
    parser.add_argument("--r18", action="store_true", help="The novel is hosted on novel18.syosetu.com.")
    parser.add_argument("--title", help="Use this title instead of the one reported by the API.")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), help="Chapter page layout to expect.")
    parser.add_argument("--max-retries", type=_non_negative_int,
                        help="Give up on a chapter after this many retries. Default: retry forever.")
    parser.add_argument("--output-dir", default=".", help="Directory for the Markdown file. Default: current.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("novel", type=_novel_id, help="Id of the novel to dump (e.g. n9185fm)")
    return parser


def request_from_args(args: argparse.Namespace) -> DownloadRequest:
    return DownloadRequest(
        novel_id=args.novel,
        is_adult=args.r18,
        chapter_range=ChapterRange(args.start, args.end),
        title=args.title,
        layout=args.layout,
        max_retries=args.max_retries,
        output_dir=args.output_dir,
    )


def _ask(prompt: str) -> str:
    return input(prompt).strip()


def prompt_request() -> DownloadRequest:
    """Collects a DownloadRequest from stdin, re-prompting until every answer is valid."""
    while True:
        line = _ask(">Please input novel id (e.g. n9185fm): ")
        if not line:
            continue
        try:
            novel_id = NovelId.parse(line)
            break
        except InvalidInputError as e:
            print(f"!>>>{e}", file=sys.stderr)

    line = _ask(">Is novel 18+?(y/N):")
    is_adult = line.lower() in ("y", "yes")

    print(">Please specify which chapters to download:")
    while True:
        line = _ask("Start FROM chapter(defaults to 1)?:")
        if not line:
            start = 1
            break
        try:
            start = int(line)
        except ValueError:
            print(f"!>>>'{line}': not a number", file=sys.stderr)
            continue
        if start < 1:
            print("!>>>Chapter cannot be zero", file=sys.stderr)
            continue
        break

    while True:
        line = _ask("TO chapter(leave empty for all)?:")
        if not line:
            end = None
            break
        try:
            end = int(line)
        except ValueError:
            print(f"!>>>'{line}': not a number", file=sys.stderr)
            continue
        if end <= start:
            print(f"!>>>Number has to be greater than from='{start}'", file=sys.stderr)
            continue
        break

    return DownloadRequest(novel_id=novel_id, is_adult=is_adult, chapter_range=ChapterRange(start, end))


def _apply_overrides(settings: Settings, request: DownloadRequest) -> Settings:
    if request.layout:
        settings.layout = request.layout
    if request.max_retries is not None:
        settings.max_retries = request.max_retries
    return settings


def _wait_for_enter():
    try:
        input("## Press ENTER to finish...")
    except EOFError:
        pass


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    interactive = not argv

    args = None if interactive else build_parser().parse_args(argv)
    level = logging.DEBUG if args is not None and args.verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        settings = load_settings()
        request = prompt_request() if interactive else request_from_args(args)
    except InvalidInputError as e:
        logger.error(str(e))
        return 1
    except EOFError:
        logger.error("Input ended before all parameters were given")
        return 1

    code = NovelManager(_apply_overrides(settings, request)).process_novel(request)
    if interactive:
        _wait_for_enter()
    return code


if __name__ == "__main__":
    sys.exit(main())
