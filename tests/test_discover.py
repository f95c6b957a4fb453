"""Tests for the discovery CLI."""

from __future__ import annotations

import io
import json
import logging

import pytest

from linkscope import discover
from linkscope.config import DiscoveryConfig, ScopeConfig, save_config
from linkscope.fetcher import FetchError
from linkscope.types import NavigationResponse


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeFetcher:
    def __init__(self, config: DiscoveryConfig, pages: dict[str, str]):
        self.config = config
        self.pages = pages
        self.fetched: list[tuple[str, str]] = []

    def fetch(self, request):
        self.fetched.append((request.method, request.url))
        if request.url not in self.pages:
            raise FetchError(f"Failed to fetch {request.url}: HTTP 500", url=request.url, status_code=500)
        return NavigationResponse.from_body(
            url=request.url,
            depth=request.depth,
            options=self.config,
            body=self.pages[request.url],
        )

    def close(self):
        pass


def test_parse_header():
    assert discover.parse_header("X-Token:  abc ") == ("X-Token", "abc")
    assert discover.parse_header("Cookie: a=b; c=d") == ("Cookie", "a=b; c=d")
    with pytest.raises(ValueError):
        discover.parse_header("no separator")
    with pytest.raises(ValueError):
        discover.parse_header(": value")


def test_build_config_applies_cli_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    save_config(
        DiscoveryConfig(
            retries=4,
            custom_headers={"X-From-File": "1"},
            scope=ScopeConfig(allow=["file\\.example"], deny=["ads\\."]),
        ),
        path,
    )

    args = discover.parse_args(
        [
            "https://example.com",
            "--config",
            str(path),
            "--allow",
            r"example\.com",
            "--strict",
            "--scrape-js",
            "-H",
            "Cookie: sid=1",
            "--timeout-seconds",
            "2.5",
        ]
    )
    config = discover.build_config(args)

    assert config.retries == 4
    assert config.timeout_seconds == 2.5
    assert config.scrape_js_responses is True
    assert config.custom_headers == {"X-From-File": "1", "Cookie": "sid=1"}
    assert config.scope.allow == [r"example\.com"]
    assert config.scope.deny == ["ads\\."]
    assert config.scope.strict is True


def test_build_config_without_file_uses_defaults():
    config = discover.build_config(discover.parse_args(["https://example.com"]))
    assert config == DiscoveryConfig()


def test_run_discovery_writes_unique_json_lines():
    config = DiscoveryConfig(scope=ScopeConfig(allow=[r"example\.com"]))
    fetcher = FakeFetcher(
        config,
        {
            "https://example.com/": '<a href="/a">a</a><a href="/b">b</a><a href="https://other.test/">o</a>',
            "https://example.com/two": '<a href="/a">again</a><form action="/s" method="post"></form>',
        },
    )
    out = io.StringIO()

    written, failures = discover.run_discovery(
        config,
        ["https://example.com/", "https://example.com/two", "https://example.com/down"],
        out,
        fetcher=fetcher,
    )

    lines = [json.loads(line) for line in out.getvalue().splitlines()]
    assert (written, failures) == (3, 1)
    assert [(line["method"], line["url"], line["source"]) for line in lines] == [
        ("GET", "https://example.com/a", "a"),
        ("GET", "https://example.com/b", "a"),
        ("POST", "https://example.com/s", "form"),
    ]
    assert lines[2]["body"] == ""
    assert lines[2]["headers"] == {"Content-Type": "application/x-www-form-urlencoded"}
    assert all(line["depth"] == 1 for line in lines)
    assert fetcher.fetched[0] == ("GET", "https://example.com/")


def test_run_discovery_seed_method():
    config = DiscoveryConfig()
    fetcher = FakeFetcher(config, {"https://example.com/": ""})

    discover.run_discovery(config, ["https://example.com/"], io.StringIO(), method="head", fetcher=fetcher)

    assert fetcher.fetched == [("HEAD", "https://example.com/")]


def test_main_rejects_invalid_scope_pattern():
    assert discover.main(["https://example.com", "--allow", "(unclosed"]) == 2


def test_main_rejects_bad_header():
    assert discover.main(["https://example.com", "-H", "broken"]) == 2


def test_main_writes_output_file(tmp_path, monkeypatch):
    def fake_run(config, urls, out, *, method, fetcher=None):
        out.write('{"url": "https://example.com/x"}\n')
        return 1, 0

    monkeypatch.setattr(discover, "run_discovery", fake_run)
    output = tmp_path / "out" / "frontier.jsonl"

    assert discover.main(["https://example.com", "--output", str(output)]) == 0
    assert output.read_text(encoding="utf-8") == '{"url": "https://example.com/x"}\n'


def test_main_reports_failed_seeds(monkeypatch):
    monkeypatch.setattr(discover, "run_discovery", lambda *args, **kwargs: (0, 1))
    assert discover.main(["https://example.com"]) == 1
