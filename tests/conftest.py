import pytest
import asyncio
import time
from pathlib import Path
from typing import Callable
from fastapi import Request

PAGE = "<html><head><title>Home</title></head><body><p>hello</p></body></html>"

# Small site used by the HTTP tests
@pytest.fixture(scope="function")
def site_dir(tmp_path: Path) -> Path:
    (tmp_path / "index.html").write_text(PAGE)
    (tmp_path / "style.css").write_text("body { color: red; }")
    (tmp_path / "data.json").write_text('{"a": 1}')
    (tmp_path / "guide.md").write_text("# Hi\n\nSome *text*.")
    (tmp_path / "headless.html").write_text("<p>no head here</p>")
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "index.html").write_text(PAGE)
    (docs / "setup.md").write_text("# Setup")
    return tmp_path

def make_request(path: str, method: str = "GET") -> Request:
    return Request({
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [],
    })

@pytest.fixture
def request_for() -> Callable[..., Request]:
    return make_request

def wait_until(condition: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll ``condition`` from synchronous code"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()

async def async_wait_until(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        await asyncio.sleep(0.02)
    return condition()
