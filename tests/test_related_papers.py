"""
Related work: search-term parsing/fallbacks and OpenAlex ranking.
"""
from datetime import date

import pytest

import related_papers
from related_papers import (
    _months_before,
    extract_basic_terms,
    generate_search_terms,
    parse_search_terms,
    rank_papers,
    search_openalex,
)


DOC = "Climate models, climate models and climate adaptation policy for the region."


class FakeResponse:
    def __init__(self, status_code, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        return self._payload


def _work(i, *, cites=0, pub="2026-01-01", doi=None, abstract=True, venue="Journal"):
    return {
        "id": f"W{i}",
        "title": f"Paper {i}",
        "doi": doi if doi is not None else f"https://doi.org/10.1/{i}",
        "abstract_inverted_index": {"Hello": [0], "world": [1]} if abstract else None,
        "primary_location": {"source": {"display_name": venue}} if venue else None,
        "publication_year": int(pub[:4]),
        "publication_date": pub,
        "cited_by_count": cites,
        "authorships": [{"author": {"id": "A1", "display_name": "Ada"}}],
    }


# ---------- search terms ----------

def test_basic_terms_by_frequency():
    assert extract_basic_terms(DOC) == ["climate", "climate models", "climate adaptation"]


def test_basic_terms_ties_keep_first_seen_order():
    assert extract_basic_terms("zebra alpha zebra mango alpha") == ["zebra", "zebra alpha", "zebra mango"]


def test_basic_terms_empty_text():
    assert extract_basic_terms("") == []
    assert extract_basic_terms("a an the of") == []


def test_parse_terms_from_fenced_json_array():
    assert parse_search_terms('```json\n["remote work", "team creativity"]\n```', DOC) == [
        "remote work",
        "team creativity",
    ]


def test_parse_terms_from_plain_lines():
    assert parse_search_terms('"remote work"\n"team creativity", \'software teams\'', DOC) == [
        "remote work",
        "team creativity",
        "software teams",
    ]


def test_parse_terms_falls_back_on_broken_json():
    assert parse_search_terms("[remote work, team creativity]", DOC) == extract_basic_terms(DOC)


def test_parse_terms_falls_back_on_empty_array():
    assert parse_search_terms("[]", DOC) == extract_basic_terms(DOC)


def test_generate_terms_falls_back_when_api_fails(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("Grok API error 500")

    monkeypatch.setattr(related_papers, "grok_chat", boom)
    assert generate_search_terms("key", DOC) == extract_basic_terms(DOC)


def test_generate_terms_sends_truncated_document(monkeypatch):
    seen = {}

    def fake_chat(key, messages, **kwargs):
        seen["prompt"] = messages[0]["content"]
        return {"choices": [{"message": {"content": '["urban heat"]'}}]}

    monkeypatch.setattr(related_papers, "grok_chat", fake_chat)
    terms = generate_search_terms("key", "x" * 5000 + "TAIL", "paper_draft")
    assert terms == ["urban heat"]
    assert "academic paper draft" in seen["prompt"]
    assert "TAIL" not in seen["prompt"]


# ---------- openalex ----------

def test_months_before_clamps_day():
    assert _months_before(date(2026, 8, 31), 6) == date(2026, 2, 28)
    assert _months_before(date(2026, 3, 15), 6) == date(2025, 9, 15)


def test_search_without_usable_query_skips_request(monkeypatch):
    def no_call(*args, **kwargs):
        raise AssertionError("should not query OpenAlex")

    monkeypatch.setattr(related_papers.requests, "get", no_call)
    assert search_openalex([]) == {"query": "", "papers": [], "total": 0}
    assert search_openalex(["ab "]) == {"query": "ab ", "papers": [], "total": 0}


def test_search_filters_ranks_and_limits(monkeypatch):
    works = [
        _work(1, cites=5, pub="2026-01-10"),
        _work(2, cites=50),
        _work(3, cites=5, pub="2026-02-01", doi="10.1/three"),
        _work(4, cites=99, doi=""),                          # no url
        _work(5, cites=80, abstract=False, venue=None),      # no abstract, no venue
        _work(6, cites=1, abstract=False),
        _work(7, cites=0),
    ]
    seen = {}

    def fake_get(url, params, headers, timeout):
        seen["params"] = params
        seen["headers"] = headers
        return FakeResponse(200, {"results": works, "meta": {"count": 321}})

    monkeypatch.setattr(related_papers.requests, "get", fake_get)
    result = search_openalex(["urban heat islands", "ignored"], today=date(2026, 3, 15), mailto="me@example.org")

    assert result["query"] == "urban heat islands"
    assert result["total"] == 321
    assert [p["paper_id"] for p in result["papers"]] == ["W2", "W3", "W1", "W6"]
    assert seen["params"]["search"] == "urban heat islands"
    assert seen["params"]["filter"] == "from_publication_date:2025-09-15"
    assert "mailto:me@example.org" in seen["headers"]["User-Agent"]

    paper = result["papers"][1]
    assert paper["url"] == "https://doi.org/10.1/three"
    assert paper["abstract"] == "Hello world"
    assert paper["venue"] == "Journal"
    assert paper["authors"] == [{"author_id": "A1", "name": "Ada"}]


def test_search_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(related_papers.requests, "get", lambda *a, **k: FakeResponse(503, text="down"))
    with pytest.raises(RuntimeError, match="503"):
        search_openalex(["urban heat islands"], today=date(2026, 3, 15))


def test_rank_papers_recent_first_on_citation_ties():
    papers = [
        {"paper_id": "old", "citation_count": 3, "publication_date": "2025-10-01"},
        {"paper_id": "new", "citation_count": 3, "publication_date": "2026-01-01"},
        {"paper_id": "nodate", "citation_count": 3, "publication_date": ""},
        {"paper_id": "top", "citation_count": 10, "publication_date": ""},
    ]
    assert [p["paper_id"] for p in rank_papers(papers)] == ["top", "new", "old", "nodate"]
