# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Local HTTP search server.

Built on the standard library's http.server: one process, one loaded index,
JSON in and out. It binds to localhost by default; put a reverse proxy in
front if remote clients need it.

Endpoints:
  POST /search     {"query": str, "k": int?, "filter": object?} -> ranked results
  GET  /status     index size, retrievers, uptime, requests served
  POST /shutdown   stop the server
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass, field
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any

from rankr.logging.logger import get_logger
from rankr.pipeline import Pipeline, PipelineError
from rankr.retrieve.errors import EmptyQueryError, InvalidParameterError
from rankr.retrieve.filtering import filter_from_dict

logger: logging.Logger = get_logger(__name__)

LOCAL_HOSTS = ("127.0.0.1", "localhost", "::1")


@dataclass(frozen=True)
class SearchStatus:
    index_path: str
    num_docs: int
    vocabulary_size: int
    retrievers: list[str] = field(default_factory=list)
    fusion_method: str = "rrf"


class SearchRequestHandler(BaseHTTPRequestHandler):
    server: "SearchServer"

    def log_message(self, format: str, *args: Any) -> None:
        """Requests are logged through the structured logger instead."""
        pass

    def do_GET(self) -> None:
        if self.path == "/status":
            self._handle_status()
        else:
            self._send_error(404, "Not found")

    def do_POST(self) -> None:
        routes = {
            "/search": self._handle_search,
            "/shutdown": self._handle_shutdown,
        }
        handler = routes.get(self.path)
        if handler is None:
            self._send_error(404, f"Unknown endpoint: {self.path}")
            return
        handler()

    def _read_body(self) -> dict[str, Any] | None:
        """
        Parse the JSON body. On any problem the error response has already
        been sent and None comes back.
        """
        try:
            content_length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            self._send_error(400, "Invalid Content-Length header")
            return None
        max_size = self.server.max_request_size_bytes

        if content_length <= 0:
            self._send_error(400, "Request body is empty")
            return None

        if content_length > max_size:
            self._send_error(
                413,
                f"Payload too large: {content_length} bytes exceeds limit of {max_size}",
            )
            return None

        try:
            raw = self.rfile.read(content_length)
            body = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            self._send_error(400, f"Invalid JSON: {err}")
            return None

        if not isinstance(body, dict):
            self._send_error(400, "Request body must be a JSON object")
            return None
        return body

    def _handle_search(self) -> None:
        body = self._read_body()
        if body is None:
            return

        query = body.get("query")
        if not isinstance(query, str) or not query.strip():
            self._send_error(400, "Missing required field: query")
            return

        k = body.get("k", self.server.default_k)
        if not isinstance(k, int) or isinstance(k, bool) or k < 1:
            self._send_error(400, "Field k must be a positive integer")
            return

        start = time.perf_counter()
        try:
            predicate = filter_from_dict(body["filter"]) if body.get("filter") is not None else None
            results = self.server.pipeline.search(query, k, predicate=predicate)
        except EmptyQueryError:
            self._send_error(400, "Query has no searchable terms")
            return
        except (InvalidParameterError, PipelineError) as err:
            self._send_error(400, str(err))
            return
        except Exception as err:
            logger.error("Search failed", extra={"error": str(err)}, exc_info=True)
            self._send_error(500, f"Search error: {err}")
            return

        took_ms = (time.perf_counter() - start) * 1000.0
        self.server.record_request()
        logger.info(
            "Search served",
            extra={"k": k, "results": len(results), "took_ms": round(took_ms, 3)},
        )
        self._send_json(
            200,
            {
                "query": query,
                "k": k,
                "results": [
                    {"rank": rank, "doc_id": doc_id, "score": score}
                    for rank, (doc_id, score) in enumerate(results, start=1)
                ],
                "took_ms": round(took_ms, 3),
            },
        )

    def _handle_status(self) -> None:
        payload = asdict(self.server.status)
        payload["uptime_seconds"] = round(time.monotonic() - self.server.start_time, 2)
        payload["requests_served"] = self.server.requests_served
        self._send_json(200, payload)

    def _handle_shutdown(self) -> None:
        self._send_json(200, {"message": "Server shutting down"})
        logger.info("Shutdown requested via API")
        threading.Thread(target=self.server.shutdown, daemon=True).start()

    def _send_json(self, status_code: int, data: dict[str, Any]) -> None:
        payload = json.dumps(data, default=str).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _send_error(self, status_code: int, message: str) -> None:
        self._send_json(status_code, {"error": message})


class SearchServer(HTTPServer):
    """HTTPServer carrying the pipeline and status, reachable from handlers as self.server."""

    def __init__(
        self,
        address: tuple[str, int],
        pipeline: Pipeline,
        status: SearchStatus,
        max_request_size_bytes: int,
        default_k: int = 10,
    ) -> None:
        super().__init__(address, SearchRequestHandler)
        self.pipeline = pipeline
        self.status = status
        self.max_request_size_bytes = max_request_size_bytes
        self.default_k = default_k
        self.start_time = time.monotonic()
        self._requests_served = 0
        self._lock = threading.Lock()

    @property
    def requests_served(self) -> int:
        with self._lock:
            return self._requests_served

    def record_request(self) -> None:
        with self._lock:
            self._requests_served += 1


def run_server(
    pipeline: Pipeline,
    host: str,
    port: int,
    status: SearchStatus,
    max_request_size_bytes: int,
    default_k: int = 10,
) -> None:
    """Serve until /shutdown or Ctrl+C."""
    if host not in LOCAL_HOSTS:
        logger.warning("Server binding to a non-localhost address", extra={"host": host})

    server = SearchServer(
        (host, port),
        pipeline=pipeline,
        status=status,
        max_request_size_bytes=max_request_size_bytes,
        default_k=default_k,
    )
    logger.info(
        "rankr search server started",
        extra={"host": host, "port": server.server_address[1], "docs": status.num_docs},
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down server (keyboard interrupt)")
    finally:
        server.server_close()
        logger.info("Server stopped")
