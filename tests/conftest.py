"""Shared fixtures for httphook tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from httphook import HookRequest, HttpHook, HttpMethod, Response, render_body


@pytest.fixture
def hook() -> Iterator[HttpHook]:
    """A started hook with no transport collaborator."""
    h = HttpHook()
    h.start()
    yield h
    h.teardown()


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """A small YAML rule set covering all three rule kinds."""
    path = tmp_path / "rules.yaml"
    path.write_text(
        """\
rules:
  - type: exact
    url: http://x/a
    method: GET
    response:
      json: {"id": 1}
  - type: template
    host: api.example.com
    template: /user/:id
    method: GET
    response:
      status: 200
      body: user
      headers: {x-source: template}
  - type: regex
    regex: ^/search/(.+)$
    method: GET
    response:
      pass_through: true
  - type: regex
    regex: ^/search/
    method: GET
    response:
      status: 404
      reason: Nope
""",
        encoding="utf-8",
    )
    return path


def make_request(
    method: str, url: str, headers: dict[str, str] | None = None
) -> HookRequest:
    return HookRequest.build(HttpMethod.from_string(method), url, headers)


async def read_body(response: Response) -> bytes:
    return b"".join([chunk async for chunk in render_body(response.body)])
