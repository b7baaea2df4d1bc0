"""Shared fixtures: isolated project home, input files and mocked HTTP."""

from __future__ import annotations

import socket
import threading
import time
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Iterable, Iterator, Mapping

import httpx
import pytest

from site_searcher.config import HttpConfig, SearchConfig


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path_factory.getbasetemp() / "home"
    home.mkdir(exist_ok=True)
    monkeypatch.setenv("SITE_SEARCHER_HOME", str(home))
    return home


@pytest.fixture
def write_targets(tmp_path: Path) -> Callable[..., Path]:
    def _writer(targets: Iterable[str], name: str = "urls.txt", header: str = "rank,url") -> Path:
        path = tmp_path / name
        lines = [header] + [f"{index},{target}" for index, target in enumerate(targets, start=1)]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _writer


Responder = Callable[[httpx.Request], httpx.Response]


def body(text: str, status_code: int = 200) -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=text, request=request)

    return _respond


def timeout() -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    return _respond


def refused() -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return _respond


def slow(text: str, delay: float) -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        time.sleep(delay)
        return httpx.Response(200, text=text, request=request)

    return _respond


class FailingStream(httpx.SyncByteStream):
    """Body stream that breaks after the first chunk."""

    def __init__(self) -> None:
        self.closed = False

    def __iter__(self):
        yield b"partial "
        raise httpx.ReadError("connection reset while reading body")

    def close(self) -> None:
        self.closed = True


def broken_body(stream: FailingStream | None = None) -> Responder:
    def _respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=stream or FailingStream(), request=request)

    return _respond


@pytest.fixture
def respond() -> SimpleNamespace:
    """Responder factories for ``mock_transport`` routes."""

    return SimpleNamespace(
        body=body,
        timeout=timeout,
        refused=refused,
        slow=slow,
        broken_body=broken_body,
        FailingStream=FailingStream,
    )


@pytest.fixture
def mock_transport() -> Callable[[Mapping[str, Responder]], httpx.MockTransport]:
    """Build a transport answering by host; unknown hosts are refused."""

    def _builder(routes: Mapping[str, Responder]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            responder = routes.get(request.url.host)
            if responder is None:
                raise httpx.ConnectError("unknown host", request=request)
            return responder(request)

        return httpx.MockTransport(handler)

    return _builder


@pytest.fixture
def search_config(tmp_path: Path) -> Callable[..., SearchConfig]:
    def _builder(**overrides: Any) -> SearchConfig:
        base: dict[str, Any] = {
            "in_file": tmp_path / "urls.txt",
            "out_file": tmp_path / "results.csv",
            "search_term": "Treasure",
            "concurrency": 4,
            "http": HttpConfig(timeout=2.0),
        }
        base.update(overrides)
        return SearchConfig(**base)

    return _builder


@pytest.fixture
def trickle_server() -> Iterator[str]:
    """Local HTTP server that sends its body one byte at a time.

    Yields ``host:port``; the full 20-byte body would take about six seconds.
    """

    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(10)
    stop = threading.Event()

    def serve() -> None:
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            try:
                conn.recv(65536)
                conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Length: 20\r\nConnection: close\r\n\r\n")
                for byte in b"Treasure............":
                    if stop.wait(0.3):
                        return
                    conn.sendall(bytes([byte]))
            except OSError:
                return

    thread = threading.Thread(target=serve, name="trickle-server", daemon=True)
    thread.start()
    host, port = listener.getsockname()
    try:
        yield f"{host}:{port}"
    finally:
        stop.set()
        listener.close()
        thread.join(timeout=5)
