"""HTTP front end binding the request handlers to their paths."""

from __future__ import annotations

import argparse
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from . import handlers
from .options import VecDbOpts
from .validator import RequestError
from .vecdb import VecDb

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5577

Handler = Callable[[VecDb, "str | bytes | None"], str]

ROUTES: Mapping[str, Handler] = {
    "/vecdb/create": handlers.create_db,
    "/vecdb/update": handlers.update_db,
    "/vecdb/delete": handlers.delete_db,
    "/vectors/set": handlers.set_vectors,
    "/vectors/delete": handlers.delete_vectors,
    "/vectors/search": handlers.search_vector,
    "/vectors/batch_search": handlers.search_vectors,
}


@dataclass(frozen=True)
class Response:
    """Status code and body of a reply."""

    status: int
    body: str = ""


def error_body(message: str) -> str:
    """Return the JSON error body carrying ``message``."""
    return '{"error": "' + message + '"}'


class VecDbApp:
    """Dispatches requests to the handlers, serialising access to the database."""

    def __init__(self, db: VecDb) -> None:
        self.db = db
        self._lock = threading.Lock()

    def handle(self, method: str, path: str, body: str | bytes | None) -> Response:
        """Run the handler bound to ``path`` and build the reply."""
        handler = ROUTES.get(path.split("?", 1)[0])
        if handler is None:
            return Response(404)
        if method.upper() != "POST":
            return Response(422)
        try:
            with self._lock:
                return Response(200, handler(self.db, body))
        except RequestError as exc:
            return Response(exc.code, "" if exc.message is None else error_body(exc.message))


def make_server(
    app: VecDbApp, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT
) -> ThreadingHTTPServer:
    """Create an HTTP server answering through ``app``."""

    class _RequestHandler(BaseHTTPRequestHandler):
        def _dispatch(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            payload = self.rfile.read(length) if length > 0 else b""
            response = app.handle(self.command, self.path, payload)
            data = response.body.encode("utf-8")
            self.send_response(response.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        do_GET = do_POST = do_PUT = do_DELETE = _dispatch

        def log_message(self, format: str, *args: object) -> None:
            pass

    return ThreadingHTTPServer((host, port), _RequestHandler)


def _read_config(path: Path) -> dict[str, str]:
    config: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith(("#", ";", "[")) or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        config[key] = value.strip("\"'")
    return config


def main(argv: list[str] | None = None) -> int:
    """Run the vector database HTTP server."""
    parser = argparse.ArgumentParser(prog="littlevec", description="Vector database server.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--config", type=Path, help="file of 'key = value' settings")
    args = parser.parse_args(argv)

    try:
        cfg = _read_config(args.config) if args.config else {}
        opts = VecDbOpts.from_config(cfg)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    app = VecDbApp(VecDb(opts))
    with make_server(app, args.host, args.port) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0