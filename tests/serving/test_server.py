# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the local HTTP search server."""

import http.client
import json
import threading
from typing import Any, Iterator

import pytest

from rankr.config.schema import RetrievalConfig
from rankr.pipeline import build_pipeline
from rankr.retrieve.analysis import Analyzer
from rankr.retrieve.filtering import MetadataStore
from rankr.retrieve.index import InvertedIndex
from rankr.serving.server import SearchServer, SearchStatus

MAX_REQUEST_SIZE = 2048


@pytest.fixture()
def server(small_index: InvertedIndex) -> Iterator[SearchServer]:
    store = MetadataStore.from_dict({"d3": {"lang": 2}, "d4": {"lang": 2}, "d1": {"lang": 1}})
    pipeline = build_pipeline(
        small_index,
        Analyzer(),
        RetrievalConfig(config_version="1.0.0"),
        metadata_store=store,
    )
    status = SearchStatus(
        index_path="memory",
        num_docs=small_index.num_docs,
        vocabulary_size=small_index.vocabulary_size,
        retrievers=list(pipeline.retrievers),
    )
    server = SearchServer(
        ("127.0.0.1", 0),  # port 0 picks a random free port
        pipeline=pipeline,
        status=status,
        max_request_size_bytes=MAX_REQUEST_SIZE,
        default_k=3,
    )
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


def _request(
    server: SearchServer,
    method: str,
    path: str,
    body: Any = None,
    raw: bytes | None = None,
) -> tuple[int, dict[str, Any]]:
    host, port = server.server_address[:2]
    conn = http.client.HTTPConnection(host, port, timeout=5)
    try:
        payload = raw if raw is not None else (json.dumps(body).encode("utf-8") if body is not None else None)
        headers = {"Content-Type": "application/json"}
        conn.request(method, path, body=payload, headers=headers)
        response = conn.getresponse()
        return response.status, json.loads(response.read().decode("utf-8"))
    finally:
        conn.close()


class TestSearchEndpoint:
    def test_ranked_results(self, server: SearchServer) -> None:
        status, data = _request(server, "POST", "/search", {"query": "brown fox", "k": 5})
        assert status == 200
        assert data["k"] == 5
        assert [r["doc_id"] for r in data["results"]] == ["d1", "d2"]
        assert [r["rank"] for r in data["results"]] == [1, 2]

    def test_default_k(self, server: SearchServer) -> None:
        status, data = _request(server, "POST", "/search", {"query": "documents rank query retrieval"})
        assert status == 200
        assert data["k"] == 3
        assert len(data["results"]) <= 3

    def test_filter(self, server: SearchServer) -> None:
        body = {"query": "documents query", "filter": {"field": "lang", "value": 2}}
        status, data = _request(server, "POST", "/search", body)
        assert status == 200
        assert {r["doc_id"] for r in data["results"]} == {"d3", "d4"}

    def test_bad_filter(self, server: SearchServer) -> None:
        body = {"query": "fox", "filter": {"between": [1, 2]}}
        status, _ = _request(server, "POST", "/search", body)
        assert status == 400

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"query": "   "},
            {"query": "fox", "k": 0},
            {"query": "fox", "k": "ten"},
            {"query": "fox", "k": True},
            ["fox"],
        ],
    )
    def test_invalid_requests(self, server: SearchServer, body: Any) -> None:
        status, data = _request(server, "POST", "/search", body)
        assert status == 400
        assert "error" in data

    def test_query_without_terms(self, server: SearchServer) -> None:
        status, data = _request(server, "POST", "/search", {"query": "?!"})
        assert status == 400
        assert "no searchable terms" in data["error"]

    def test_invalid_json(self, server: SearchServer) -> None:
        status, data = _request(server, "POST", "/search", raw=b"{not json")
        assert status == 400
        assert data["error"].startswith("Invalid JSON")

    def test_payload_too_large(self, server: SearchServer) -> None:
        body = {"query": "fox " * MAX_REQUEST_SIZE}
        status, data = _request(server, "POST", "/search", body)
        assert status == 413
        assert "Payload too large" in data["error"]


class TestStatusEndpoint:
    def test_reports_index_and_requests(self, server: SearchServer) -> None:
        _request(server, "POST", "/search", {"query": "fox"})
        status, data = _request(server, "GET", "/status")
        assert status == 200
        assert data["num_docs"] == 5
        assert data["retrievers"] == ["tfidf"]
        assert data["requests_served"] == 1
        assert data["uptime_seconds"] >= 0

    def test_unknown_paths(self, server: SearchServer) -> None:
        assert _request(server, "GET", "/nope")[0] == 404
        assert _request(server, "POST", "/nope", {"query": "fox"})[0] == 404


class TestShutdown:
    def test_shutdown_endpoint(self, small_index: InvertedIndex) -> None:
        pipeline = build_pipeline(small_index, Analyzer(), RetrievalConfig(config_version="1.0.0"))
        status = SearchStatus(index_path="memory", num_docs=5, vocabulary_size=0)
        server = SearchServer(("127.0.0.1", 0), pipeline, status, MAX_REQUEST_SIZE)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        code, data = _request(server, "POST", "/shutdown")
        assert code == 200
        assert data["message"] == "Server shutting down"
        thread.join(timeout=5)
        assert not thread.is_alive()
        server.server_close()
