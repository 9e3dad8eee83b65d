# related_papers.py
"""
Related-work suggestions for a document under review.

1) search terms: Grok proposes 1-3 queries; on any failure fall back to the
   most frequent meaningful words of the document
2) OpenAlex: papers from the last six months for the first query, ranked by
   citation count, then recency

Purely advisory: nothing here feeds the quote anchoring.
"""

import calendar
import json
import re
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from grok_client import DEFAULT_GROK_MODEL, grok_chat, message_content


OPENALEX_WORKS_URL = "https://api.openalex.org/works"
DEFAULT_MAILTO = "support@academicfeedback.app"
RECENT_MONTHS = 6
OPENALEX_PER_PAGE = 10
MAX_PAPERS = 4
MAX_PROMPT_CHARS = 4000

STOP_WORDS = {
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "with", "by",
    "about", "as", "into", "like", "through", "after", "over", "between", "out",
    "against", "during", "without", "before", "under", "around", "among",
}


# ============================================================
# SEARCH TERMS
# ============================================================
def extract_basic_terms(text: str) -> List[str]:
    """Top words by frequency (len > 4, no stop words) combined into at most 3 queries."""
    words = re.sub(r"[^\w\s]", " ", (text or "").lower()).split()
    words = [w for w in words if len(w) > 4 and w not in STOP_WORDS]

    # most_common keeps first-seen order on equal counts
    top = [w for w, _ in Counter(words).most_common(5)]
    if not top:
        return []

    terms = [top[0]]
    if len(top) > 1:
        terms.append(f"{top[0]} {top[1]}")
    if len(top) > 2:
        terms.append(f"{top[0]} {top[2]}")
    return terms[:3]


def parse_search_terms(response_text: str, document_text: str) -> List[str]:
    text = response_text or "[]"
    start = text.find("[")
    end = text.rfind("]")

    if start != -1 and end > start:
        try:
            parsed = json.loads(text[start : end + 1])
        except ValueError as e:
            print(f"  Failed to parse search terms ({e}); using basic term extraction")
            return extract_basic_terms(document_text)
        if not isinstance(parsed, list):
            parsed = []
        terms = [str(t).strip() for t in parsed if isinstance(t, str) and t.strip()]
    else:
        parts = [p.strip() for p in re.split(r"[\n,]", text)]
        parts = [p for p in parts if p and not p.startswith("[") and not p.startswith("]") and '":[' not in p]
        terms = [re.sub(r"^[\"'\s]+|[\"'\s]+$", "", p) for p in parts]
        terms = [t for t in terms if t]

    return terms or extract_basic_terms(document_text)


def generate_search_terms(
    grok_api_key: str,
    document_text: str,
    document_type: str = "proposal",
    *,
    model: str = DEFAULT_GROK_MODEL,
    temperature: float = 0.2,
) -> List[str]:
    kind = "research proposal" if document_type == "proposal" else "academic paper draft"
    prompt = (
        f"Based on the following {kind}, generate 1-3 specific search terms or queries that would be "
        "useful for finding related academic papers.\n"
        "Focus on the core research topics, methods, or unique aspects that would yield relevant literature.\n"
        'Format your response as a JSON array of strings. Example: ["quantum computing ethics", '
        '"post-quantum cryptography"]\n\n'
        "Here's the document:\n"
        f"{document_text[:MAX_PROMPT_CHARS]}... [truncated for brevity]"
    )
    try:
        resp = grok_chat(
            grok_api_key,
            messages=[{"role": "user", "content": prompt}],
            model=model,
            temperature=temperature,
            max_tokens=1024,
            timeout=60,
            max_retries=2,
        )
        content = message_content(resp)
    except Exception as e:
        print(f"  Search term generation failed ({e}); using basic term extraction")
        return extract_basic_terms(document_text)
    return parse_search_terms(content, document_text)


# ============================================================
# OPENALEX
# ============================================================
def _months_before(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) - months
    year, month0 = divmod(index, 12)
    month = month0 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def _rebuild_abstract(inverted_index: Any) -> str:
    """OpenAlex ships abstracts as {word: [positions]}."""
    if not isinstance(inverted_index, dict):
        return ""
    placed: Dict[int, str] = {}
    for word, positions in inverted_index.items():
        for pos in positions or []:
            if isinstance(pos, int):
                placed[pos] = word
    return " ".join(placed[i] for i in sorted(placed))


def _paper_url(work: Dict[str, Any]) -> str:
    doi = work.get("doi") or ""
    if doi:
        return doi if doi.startswith("http") else f"https://doi.org/{doi}"
    return ((work.get("open_access") or {}).get("oa_url")) or ""


def _paper_from_work(work: Dict[str, Any]) -> Dict[str, Any]:
    source = ((work.get("primary_location") or {}).get("source")) or {}
    authors = []
    for authorship in work.get("authorships") or []:
        author = (authorship or {}).get("author") or {}
        authors.append({
            "author_id": author.get("id") or "",
            "name": author.get("display_name") or "Unknown Author",
        })
    return {
        "paper_id": work.get("id") or "",
        "title": work.get("title") or "Untitled Paper",
        "abstract": _rebuild_abstract(work.get("abstract_inverted_index")),
        "url": _paper_url(work),
        "venue": source.get("display_name") or "",
        "year": work.get("publication_year"),
        "authors": authors,
        "publication_date": work.get("publication_date") or "",
        "citation_count": int(work.get("cited_by_count") or 0),
    }


def rank_papers(papers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # most cited first, newer first on ties (ISO dates compare as strings)
    return sorted(
        papers,
        key=lambda p: (int(p.get("citation_count") or 0), p.get("publication_date") or ""),
        reverse=True,
    )


def search_openalex(
    search_terms: List[str],
    *,
    today: Optional[date] = None,
    mailto: Optional[str] = None,
    timeout: int = 30,
) -> Dict[str, Any]:
    """
    Query OpenAlex with the first search term.
    Returns {"query", "papers", "total"}; raises RuntimeError on a non-2xx response.
    """
    if not search_terms:
        return {"query": "", "papers": [], "total": 0}

    query = str(search_terms[0] or "")
    if len(query.strip()) < 3:
        return {"query": query, "papers": [], "total": 0}

    from_date = _months_before(today or date.today(), RECENT_MONTHS).isoformat()
    params = {
        "search": query,
        "filter": f"from_publication_date:{from_date}",
        "sort": "relevance_score:desc",
        "per_page": str(OPENALEX_PER_PAGE),
    }
    headers = {"User-Agent": f"AcademicFeedbackAssistant/1.0 (mailto:{mailto or DEFAULT_MAILTO})"}

    print(f"Querying OpenAlex with: {query}, from date: {from_date}")
    resp = requests.get(OPENALEX_WORKS_URL, params=params, headers=headers, timeout=(10, timeout))
    if resp.status_code >= 300:
        raise RuntimeError(f"OpenAlex API error {resp.status_code}: {resp.text}")

    data = resp.json()
    papers = [_paper_from_work(w) for w in (data.get("results") or []) if isinstance(w, dict)]
    papers = [p for p in papers if p["title"] and p["url"] and (p["abstract"] or p["venue"])]
    papers = rank_papers(papers)[:MAX_PAPERS]

    return {
        "query": query,
        "papers": papers,
        "total": int((data.get("meta") or {}).get("count") or 0),
    }
