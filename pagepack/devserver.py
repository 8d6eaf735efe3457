"""Watch mode: rebuild changed pages, serve the output and push reloads to browsers."""

from __future__ import annotations

import asyncio
import concurrent.futures
import email.utils
import gzip
import logging
import os
import uuid
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from websockets.asyncio.server import ServerConnection, serve
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from . import document as dom
from . import mime
from .config import AppConfig
from .errors import DocumentStructureError
from .events import EventService
from .models import Page
from .pages import is_page_file, resolve_page
from .pipeline import try_process_page

logger = logging.getLogger("pagepack.devserver")

RELOAD_CHANNEL_PATH = "/pagepack-ws"
RELOAD_MESSAGE = "REFRESH"
RECONNECT_INTERVAL_MS = 5000
PUBLISHED_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
REBUILD_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}

RELOAD_CLIENT_SCRIPT = """
(() => {
  // Injected by the pagepack dev server. Reloads the page on every project change
  // and reconnects once the server comes back after a restart.
  const sleep = (ms) => new Promise((resolve) => setTimeout(resolve, ms));
  const open = () => new WebSocket(
    `ws://${location.host}%(path)s?id=${Date.now().toString(36)}${Math.random().toString(36).slice(2)}`
  );
  async function reopen() {
    while (true) {
      const ws = open();
      await sleep(%(interval)d);
      if (ws.readyState === WebSocket.OPEN) {
        return ws;
      }
    }
  }
  function onmessage({data}) {
    if (data === "%(message)s") {
      window.location.reload();
    }
  }
  async function onclose() {
    ws = await reopen();
    ws.onmessage = onmessage;
    ws.onclose = onclose;
  }
  let ws = open();
  ws.onmessage = onmessage;
  ws.onclose = onclose;
})();
""" % {"path": RELOAD_CHANNEL_PATH, "interval": RECONNECT_INTERVAL_MS, "message": RELOAD_MESSAGE}


def add_reload_client_script(html_text: str) -> str:
    document = dom.parse(html_text)
    body = document.find("body")
    if body is None:
        raise DocumentStructureError("Failed to add the reload client script, body not found")
    dom.append_element(document, body, "script", {"data-description": "pagepack live reload"}, RELOAD_CLIENT_SCRIPT)
    return str(document)


class ChangeHandler(FileSystemEventHandler):
    """Rebuilds the touched page and publishes every change to the event bus."""

    def __init__(
        self,
        config: AppConfig,
        event_service: EventService,
        rebuild: Callable[[Page, AppConfig], bool] = try_process_page,
    ) -> None:
        super().__init__()
        self.config = config
        self.event_service = event_service
        self.rebuild = rebuild

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in PUBLISHED_EVENTS:
            return
        changed = event.dest_path if event.event_type == EVENT_TYPE_MOVED else event.src_path
        path = Path(os.fsdecode(changed))
        if path.is_relative_to(self.config.dst_dir):
            return
        logger.debug("WATCH %s %s", event.event_type, path)
        if event.event_type in REBUILD_EVENTS and is_page_file(path) and path.is_relative_to(self.config.src_dir):
            self.rebuild(resolve_page(path, self.config), self.config)
        self.event_service.publish()


def start_file_watcher(config: AppConfig, event_service: EventService) -> Observer:
    observer = Observer()
    observer.schedule(ChangeHandler(config, event_service), str(config.src_dir), recursive=True)
    observer.start()
    return observer


def _response(status: int, reason: str, body: bytes, content_type: str, extra: Optional[dict] = None) -> Response:
    headers = Headers()
    headers["Date"] = email.utils.formatdate(usegmt=True)
    headers["Connection"] = "close"
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    for key, value in (extra or {}).items():
        headers[key] = value
    return Response(status, reason, headers, body)


def _log_send_failure(future: concurrent.futures.Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.debug("Reload notification failed: %s", future.exception())


class DevServer:
    def __init__(self, config: AppConfig, event_service: Optional[EventService] = None) -> None:
        self.config = config
        self.event_service = event_service or EventService()
        self.listeners: dict[str, Callable[[], None]] = {}
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def is_reload_channel_request(self, request: Request) -> bool:
        connection = request.headers.get("Connection", "")
        upgrade = request.headers.get("Upgrade", "")
        path = urlsplit(request.path).path
        return (
            "upgrade" in connection.lower()
            and upgrade.lower() == "websocket"
            and path.endswith(RELOAD_CHANNEL_PATH)
        )

    def resolve_file(self, url_path: str) -> Optional[Path]:
        url_path = unquote(urlsplit(url_path).path)
        if url_path.endswith("/"):
            url_path += "index.html"
        root = self.config.dst_dir.resolve()
        file_path = (root / url_path.lstrip("/")).resolve()
        if not file_path.is_relative_to(root):
            return None
        if file_path.is_dir():
            file_path = file_path / "index.html"
        return file_path if file_path.is_file() else None

    def serve_file(self, url_path: str) -> Response:
        file_path = self.resolve_file(url_path)
        if file_path is None:
            logger.info("HTTP GET 404 %s", url_path)
            return _response(404, "Not Found", b"404 Not Found", "text/plain; charset=utf-8")
        logger.info("HTTP GET 200 %s", url_path)
        if file_path.suffix.lower() in {".html", ".htm"}:
            html_text = add_reload_client_script(file_path.read_text(encoding="utf-8"))
            body = gzip.compress(html_text.encode("utf-8"))
            return _response(200, "OK", body, "text/html; charset=utf-8", {"Content-Encoding": "gzip"})
        content_type = mime.guess_type(file_path.suffix) or "application/octet-stream"
        return _response(200, "OK", file_path.read_bytes(), content_type)

    async def process_request(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        if self.is_reload_channel_request(request):
            return None
        return await asyncio.to_thread(self.serve_file, request.path)

    def make_listener(self, connection: ServerConnection) -> Callable[[], None]:
        loop = self.loop

        def listener() -> None:
            future = asyncio.run_coroutine_threadsafe(connection.send(RELOAD_MESSAGE), loop)
            future.add_done_callback(_log_send_failure)

        return listener

    async def handle_reload_channel(self, connection: ServerConnection) -> None:
        query = parse_qs(urlsplit(connection.request.path).query)
        connection_id = (query.get("id") or [str(uuid.uuid4())])[0]
        listener = self.make_listener(connection)
        self.listeners[connection_id] = listener
        self.event_service.subscribe(listener)
        try:
            await connection.wait_closed()
        finally:
            self.event_service.unsubscribe(listener)
            self.listeners.pop(connection_id, None)

    def open_server(self) -> serve:
        """Create the HTTP and reload channel server; call from within the event loop."""
        self.loop = asyncio.get_running_loop()
        return serve(
            self.handle_reload_channel,
            self.config.host,
            self.config.port,
            process_request=self.process_request,
        )

    async def run(self) -> None:
        observer = start_file_watcher(self.config, self.event_service)
        try:
            async with self.open_server() as server:
                print(f"\nDevelopment server running on http://{self.config.host}:{self.config.port}\n")
                await server.serve_forever()
        finally:
            observer.stop()
            observer.join()


def start_dev_server(config: AppConfig) -> None:
    asyncio.run(DevServer(config).run())
