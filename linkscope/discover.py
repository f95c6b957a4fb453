"""CLI entrypoint: fetch seed URLs and print discovered frontier candidates."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, TextIO

from .config import DiscoveryConfig, load_config
from .fetcher import FetchError, Fetcher
from .formfill import FormFiller
from .pipeline import ExtractionPipeline
from .types import NavigationRequest


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="linkscope",
        description="Fetch pages and print the in-scope requests discovered on them as JSON lines.",
    )

    parser.add_argument("urls", nargs="+", help="Seed URL(s) to fetch.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML discovery config.",
    )

    parser.add_argument(
        "--allow",
        action="append",
        default=[],
        help="In-scope host regex (repeatable). Overrides config scope.allow if provided.",
    )
    parser.add_argument(
        "--deny",
        action="append",
        default=[],
        help="Out-of-scope host regex (repeatable). Overrides config scope.deny if provided.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Match scope patterns against whole hosts or label-aligned suffixes only.",
    )

    parser.add_argument(
        "--scrape-js",
        action="store_true",
        help="Mine endpoints from inline scripts and JavaScript responses.",
    )
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        help="Custom header 'Name: value' sent with every request (repeatable).",
    )
    parser.add_argument("--body-read-size", type=int, default=None)
    parser.add_argument("--timeout-seconds", type=float, default=None)
    parser.add_argument("--retries", type=int, default=None)
    parser.add_argument("--method", type=str, default="GET", help="Method used for the seed requests.")

    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write JSON lines here instead of stdout.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )

    return parser.parse_args(argv)


def parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        raise ValueError(f"Invalid header {raw!r}; expected 'Name: value'")
    return name, value.strip()


def build_config(args: argparse.Namespace) -> DiscoveryConfig:
    payload: dict[str, Any] = {}
    if args.config:
        payload = load_config(args.config).to_dict()

    scope = dict(payload.get("scope") or {})
    if args.allow:
        scope["allow"] = list(args.allow)
    if args.deny:
        scope["deny"] = list(args.deny)
    if args.strict:
        scope["strict"] = True
    if scope:
        payload["scope"] = scope

    if args.scrape_js:
        payload["scrape_js_responses"] = True
    if args.header:
        headers = dict(payload.get("custom_headers") or {})
        headers.update(parse_header(raw) for raw in args.header)
        payload["custom_headers"] = headers

    if args.body_read_size is not None:
        payload["body_read_size"] = args.body_read_size
    if args.timeout_seconds is not None:
        payload["timeout_seconds"] = args.timeout_seconds
    if args.retries is not None:
        payload["retries"] = args.retries

    return DiscoveryConfig.from_dict(payload)


def setup_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    # stdout carries the JSON lines.
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def run_discovery(
    config: DiscoveryConfig,
    urls: list[str],
    out: TextIO,
    *,
    method: str = "GET",
    fetcher: Fetcher | None = None,
) -> tuple[int, int]:
    """Fetch each seed and write unique candidates; returns `(written, failures)`."""

    pipeline = ExtractionPipeline(scope=config.scope.build(), filler=FormFiller(config.form_fill))
    owns_fetcher = fetcher is None
    fetcher = fetcher or Fetcher(config)

    seen: set[tuple[str, str, str | None]] = set()
    written = 0
    failures = 0

    try:
        for url in urls:
            try:
                response = fetcher.fetch(NavigationRequest.seed(url, method=method))
            except FetchError as exc:
                logging.error("%s", exc)
                failures += 1
                continue

            found = 0
            for request in pipeline.iter_requests(response):
                key = (request.method, request.url, request.body)
                if key in seen:
                    continue
                seen.add(key)
                out.write(json.dumps(request.to_json(), sort_keys=True) + "\n")
                found += 1
            written += found
            logging.info("Discovered %d new candidate(s) on %s", found, response.url)
    finally:
        if owns_fetcher:
            fetcher.close()

    return written, failures


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        config = build_config(args)
        config.scope.build()
    except (OSError, TypeError, ValueError) as exc:
        logging.error("Failed to build config: %s", exc)
        return 2

    out: TextIO = sys.stdout
    try:
        if args.output is not None:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            out = args.output.open("w", encoding="utf-8")
        try:
            written, failures = run_discovery(config, list(args.urls), out, method=args.method)
        finally:
            if out is not sys.stdout:
                out.close()
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130

    logging.info("Wrote %d candidate(s); %d seed(s) failed", written, failures)
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
