from dataclasses import replace
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from conftest import make_response, requested_headers, requested_url
from vba_docs.cache import ResponseCache
from vba_docs.catalog import CatalogClient
from vba_docs.content import TRUNCATION_MARKER
from vba_docs.models import Difficulty, OfficeApplication, VBACategory

SEARCH_PAYLOAD = {
    "results": [
        {
            "id": "/vba/excel-worksheet",
            "name": "Excel Worksheet",
            "description": "Worksheet automation",
            "officeApp": "Excel",
            "apiVersion": "16.0",
            "lastUpdated": "2024-02-01T00:00:00Z",
            "trustScore": 8,
            "examples": [{"id": "e1", "category": "Worksheet", "difficulty": "Beginner"}],
        },
        {
            "id": "/vba/excel-range",
            "name": "Excel Range",
            "description": "Range helpers",
            "officeApp": "Excel",
            "apiVersion": "16.0",
            "lastUpdated": "2024-03-01T00:00:00Z",
        },
    ],
    "totalCount": 12,
    "suggestions": ["Excel.Range"],
}


def _query(url):
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def test_search_maps_results_and_defaults(client, session):
    session.get.return_value = make_response(200, SEARCH_PAYLOAD)

    outcome = client.search_libraries("Excel.Worksheet")

    assert outcome.error is None
    assert outcome.total_count == 12
    assert outcome.suggestions == ("Excel.Range",)
    assert [r.id for r in outcome.results] == ["/vba/excel-worksheet", "/vba/excel-range"]
    assert outcome.results[0].trust_score == 8
    assert outcome.results[1].trust_score == 5
    assert outcome.results[1].usage_count == 0
    assert outcome.results[0].examples[0].category is VBACategory.WORKSHEET
    assert outcome.search_time_ms >= 0


def test_search_builds_request_with_filters(client, session):
    session.get.return_value = make_response(200, {"results": []})

    client.search_libraries(
        ' <Excel> "Worksheet" ',
        office_app=OfficeApplication.EXCEL,
        category="Worksheet",
        api_version="16.0",
        limit=500,
    )

    url = requested_url(session)
    assert url.startswith("https://api.example.test/vba/search?")
    assert _query(url) == {
        "q": "Excel Worksheet",
        "api-version": "2023-11-01",
        "app": "Excel",
        "category": "Worksheet",
        "version": "16.0",
        "limit": "50",
    }
    assert session.get.call_args.kwargs["timeout"] == 2.0
    headers = requested_headers(session)
    assert headers["Accept"] == "application/json"
    assert "Authorization" not in headers


def test_search_sends_bearer_token_when_configured(config, session):
    cfg = replace(config, api_key="secret")
    session.get.return_value = make_response(200, {"results": []})

    CatalogClient(cfg, session=session).search_libraries("Word")

    assert requested_headers(session)["Authorization"] == "Bearer secret"


def test_search_total_count_falls_back_to_result_count(client, session):
    payload = {"results": SEARCH_PAYLOAD["results"]}
    session.get.return_value = make_response(200, payload)

    outcome = client.search_libraries("Excel")

    assert outcome.total_count == 2
    assert outcome.suggestions == ()


def test_search_http_error_becomes_error_outcome(client, session):
    session.get.return_value = make_response(503, b"down", reason="Service Unavailable")

    outcome = client.search_libraries("Excel")

    assert outcome.results == ()
    assert outcome.total_count == 0
    assert outcome.error == (
        "Failed to search VBA libraries: VBA API error: 503 Service Unavailable"
    )
    assert outcome.search_time_ms >= 0


def test_search_network_error_becomes_error_outcome(client, session):
    session.get.side_effect = requests.ConnectionError("connection refused")

    outcome = client.search_libraries("Excel")

    assert outcome.results == ()
    assert outcome.error.startswith("Failed to search VBA libraries: ")
    assert "connection refused" in outcome.error


def test_search_invalid_json_becomes_error_outcome(client, session):
    session.get.return_value = make_response(200, b"<html>not json</html>")

    outcome = client.search_libraries("Excel")

    assert outcome.results == ()
    assert outcome.error.startswith("Failed to search VBA libraries")


def test_fetch_documentation_assembles_markup(client, session):
    session.get.return_value = make_response(
        200, "<h1>Range</h1><p>Cells</p><pre>Range(\"A1\").Select</pre>"
    )

    docs = client.fetch_documentation(
        "/vba/excel-range",
        topic="selection",
        difficulty=Difficulty.BEGINNER,
    )

    assert docs.startswith("# VBA Documentation\n\n## Range\n\n")
    assert '```vba\nRange("A1").Select\n```' in docs
    url = requested_url(session)
    assert url.startswith("https://docs.example.test/vba/excel-range?")
    assert _query(url) == {"topic": "selection", "difficulty": "Beginner"}
    headers = requested_headers(session)
    assert headers["Accept"].startswith("text/html")
    assert "Authorization" not in headers


def test_fetch_documentation_applies_token_budget(client, session):
    session.get.return_value = make_response(200, "<p>" + "b" * 400 + "</p>")

    docs = client.fetch_documentation("/vba/excel-range", tokens=50)

    assert docs == "b" * 50 + TRUNCATION_MARKER
    assert _query(requested_url(session))["tokens"] == "50"


def test_fetch_documentation_not_found_returns_none(client, session):
    session.get.return_value = make_response(404, b"missing")

    assert client.fetch_documentation("/vba/word-document") is None


def test_fetch_documentation_timeout_returns_none(client, session):
    session.get.side_effect = requests.Timeout("read timed out")

    assert client.fetch_documentation("/vba/word-document") is None


def test_fetch_code_examples(client, session):
    session.get.return_value = make_response(
        200,
        {
            "examples": [
                {"id": "a", "title": "A", "difficulty": "Advanced", "category": "Chart"},
                "not-an-object",
            ]
        },
    )

    examples = client.fetch_code_examples(
        "/vba/excel-chart", difficulty="Advanced", limit=3
    )

    assert [ex.id for ex in examples] == ["a"]
    assert examples[0].difficulty is Difficulty.ADVANCED
    url = requested_url(session)
    assert url.startswith("https://api.example.test/vba/examples/excel-chart?")
    assert _query(url) == {"difficulty": "Advanced", "limit": "3"}


@pytest.mark.parametrize(
    "response",
    [
        make_response(500, b"boom"),
        make_response(200, b"not json"),
        make_response(200, {"other": []}),
    ],
)
def test_fetch_code_examples_degrades_to_empty(client, session, response):
    session.get.return_value = response

    assert client.fetch_code_examples("/vba/excel-chart") == []


def test_fetch_code_examples_network_error(client, session):
    session.get.side_effect = requests.Timeout("slow")

    assert client.fetch_code_examples("/vba/excel-chart") == []


def test_successful_responses_are_cached(config, session):
    cfg = replace(config, cache_ttl_s=60)
    client = CatalogClient(cfg, session=session)
    session.get.return_value = make_response(200, SEARCH_PAYLOAD)

    first = client.search_libraries("Excel")
    second = client.search_libraries("Excel")
    client.search_libraries("Word")

    assert session.get.call_count == 2
    assert first.results == second.results


def test_failed_responses_are_not_cached(config, session):
    cfg = replace(config, cache_ttl_s=60)
    client = CatalogClient(cfg, session=session)
    session.get.return_value = make_response(404, b"")

    assert client.fetch_documentation("/vba/word-document") is None
    assert client.fetch_documentation("/vba/word-document") is None
    assert session.get.call_count == 2


def test_client_accepts_injected_cache(config, session):
    cache = ResponseCache(60)
    client = CatalogClient(config, session=session, cache=cache)
    session.get.return_value = make_response(200, "<p>doc</p>")

    client.fetch_documentation("/vba/word-document")

    assert len(cache) == 1


def test_search_tolerates_malformed_counts(client, session):
    payload = {
        "results": [{"id": "/vba/a-lib", "trustScore": "8", "usageCount": "lots"}, {}],
        "totalCount": "unknown",
    }
    session.get.return_value = make_response(200, payload)

    outcome = client.search_libraries("Excel")

    assert outcome.error is None
    assert outcome.total_count == 2
    assert [r.trust_score for r in outcome.results] == [8.0, 5]
    assert outcome.results[0].usage_count == 0


def test_library_id_is_quoted_into_one_path_segment(client, session):
    session.get.return_value = make_response(200, {"examples": []})

    client.fetch_code_examples("/vba/../admin")

    assert requested_url(session) == "https://api.example.test/vba/examples/..%2Fadmin"
