"""Check the outbound product links in the gift guides.

Usage examples::

    python -m scripts.check_links content/guides
    python -m scripts.check_links content/guides --static

Every ``[text](http...)`` link in the ``.md``/``.mdx`` files under the given
directory is requested (HEAD first, GET when the site rejects HEAD). Broken
links are printed grouped by file with their line numbers and the script
exits with status 1 when any were found. ``--static`` skips the network and
only checks that each URL parses.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import logging
import re
import sys
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
GUIDE_SUFFIXES = (".md", ".mdx")
MAX_WORKERS = 5
TIMEOUT_SECONDS = 10.0
USER_AGENT = "Mozilla/5.0 (compatible; WishlistLinkChecker/1.0)"
# Status codes some shops return for HEAD while GET works fine.
RETRY_WITH_GET = {403, 405, 501}


@dataclass(slots=True)
class Link:
    text: str
    url: str
    file: str
    line: int


@dataclass(slots=True)
class LinkResult:
    link: Link
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def broken(self) -> bool:
        if self.error:
            return True
        return self.status_code is None or self.status_code >= 400


def extract_links(path: Path) -> List[Link]:
    content = path.read_text(encoding="utf-8")
    links = []
    for match in LINK_PATTERN.finditer(content):
        text, url = match.group(1), match.group(2)
        if not url.startswith(("http://", "https://")):
            continue
        line = content.count("\n", 0, match.start()) + 1
        links.append(Link(text=text, url=url, file=path.name, line=line))
    return links


def collect_links(directory: Path) -> List[Link]:
    links: List[Link] = []
    for path in sorted(directory.rglob("*")):
        if path.is_file() and path.suffix in GUIDE_SUFFIXES:
            links.extend(extract_links(path))
    return links


def check_url_syntax(link: Link) -> LinkResult:
    try:
        parts = urlsplit(link.url)
        parts.port
    except ValueError as exc:
        return LinkResult(link, error=f"Invalid URL format: {exc}")
    if not parts.netloc:
        return LinkResult(link, error="Invalid URL format: missing host")
    return LinkResult(link, status_code=200)


def check_url(link: Link, session=None, timeout: float = TIMEOUT_SECONDS) -> LinkResult:
    http = session or requests
    headers = {"User-Agent": USER_AGENT}
    try:
        response = http.head(link.url, headers=headers, timeout=timeout, allow_redirects=True)
        if response.status_code in RETRY_WITH_GET:
            response = http.get(link.url, headers=headers, timeout=timeout, allow_redirects=True)
    except requests.RequestException as exc:
        return LinkResult(link, error=str(exc))
    return LinkResult(link, status_code=response.status_code)


def check_links(
    links: Iterable[Link],
    checker: Callable[[Link], LinkResult] = check_url,
    max_workers: int = MAX_WORKERS,
) -> List[LinkResult]:
    """Run *checker* over *links* on a small thread pool, keeping input order."""
    links = list(links)
    results: List[Optional[LinkResult]] = [None] * len(links)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_idx = {executor.submit(checker, link): idx for idx, link in enumerate(links)}
        for future in concurrent.futures.as_completed(future_to_idx):
            idx = future_to_idx[future]
            try:
                results[idx] = future.result()
            except Exception as exc:
                logger.error("Link check crashed for %s: %s", links[idx].url, exc)
                results[idx] = LinkResult(links[idx], error=str(exc))
    return [result for result in results if result is not None]


def group_broken_by_file(results: Iterable[LinkResult]) -> Dict[str, List[LinkResult]]:
    grouped: Dict[str, List[LinkResult]] = defaultdict(list)
    for result in results:
        if result.broken:
            grouped[result.link.file].append(result)
    for entries in grouped.values():
        entries.sort(key=lambda result: result.link.line)
    return dict(grouped)


def print_report(total: int, grouped: Dict[str, List[LinkResult]], out=sys.stdout) -> None:
    broken = sum(len(entries) for entries in grouped.values())
    print(f"Checked {total} links.", file=out)
    if not broken:
        print("All links OK.", file=out)
        return

    print(f"Found {broken} broken links:", file=out)
    for file_name in sorted(grouped):
        print(f"\n{file_name}", file=out)
        for result in grouped[file_name]:
            problem = result.error or f"HTTP {result.status_code}"
            print(f'  Line {result.link.line}: "{result.link.text}"', file=out)
            print(f"    URL: {result.link.url}", file=out)
            print(f"    {problem}", file=out)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check outbound links in the gift guides.")
    parser.add_argument("directory", nargs="?", default="content/guides", help="Directory holding .md/.mdx guides.")
    parser.add_argument("--static", action="store_true", help="Only validate URL syntax, no network requests.")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS, help="Concurrent requests (default: 5).")
    parser.add_argument("--timeout", type=float, default=TIMEOUT_SECONDS, help="Per-request timeout in seconds.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"Directory not found: {directory}", file=sys.stderr)
        return 2

    links = collect_links(directory)
    if args.static:
        results = [check_url_syntax(link) for link in links]
    else:
        session = requests.Session()
        results = check_links(
            links,
            checker=lambda link: check_url(link, session=session, timeout=args.timeout),
            max_workers=args.workers,
        )

    grouped = group_broken_by_file(results)
    print_report(len(links), grouped)
    return 1 if grouped else 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
