# grade_pdf_feedback.py
#
# ACADEMIC FEEDBACK pipeline (thesis proposals / paper drafts):
#   - Text: real PDF text via PyMuPDF; pages without usable text go through Azure OCR
#   - Feedback: Grok reviews the text against free-form marking guidelines
#       -> overall feedback, quoted passage comments, examination areas
#   - Anchoring: every passage quote is located in the document text and
#     highlighted (see quote_anchoring.py); unmatched quotes are kept, listed last
#   - Related work: a handful of recent, well-cited papers from OpenAlex
#
# Outputs:
#   - JSON: document text, marked text, ordered annotations, feedback, related work
#
# Env (.env):
#   Grok_API=...
#   AZURE_ENDPOINT=...   (only needed for scanned pages)
#   AZURE_KEY=...
#   OPENALEX_MAILTO=...  (optional)
#
# Usage:
#   python3 grade_pdf_feedback.py --pdf proposal.pdf --guidelines guidelines.docx --output-json feedback.json

import argparse
import io
import json
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple

try:
    import pymupdf as fitz  # PyMuPDF (preferred)
except ModuleNotFoundError:
    import fitz  # type: ignore
from PIL import Image
from azure.ai.formrecognizer import DocumentAnalysisClient
from azure.core.credentials import AzureKeyCredential
from azure.core.exceptions import HttpResponseError
from docx import Document
from dotenv import load_dotenv

from grok_client import grok_chat, message_content, parse_json_with_repair
from quote_anchoring import FeedbackItem, annotate_document, annotation_to_dict
from related_papers import generate_search_terms, search_openalex


DEFAULT_MODELS: Dict[str, Dict[str, Any]] = {
    "feedback": {"model": "grok-4-1-fast-reasoning", "temperature": 0.70},
    "search_terms": {"model": "grok-4-1-fast-reasoning", "temperature": 0.20},
    "json_repair": {"model": "grok-4-1-fast-reasoning", "temperature": 0.00},
}

DOCUMENT_TYPES = ("proposal", "paper_draft")
HARSHNESS_LEVELS = ("mild", "tough", "extremely_tough")
EXAMINATION_CATEGORIES = (
    "excellent",
    "sufficient with room for improvement",
    "insufficient",
)

# Pages with less embedded text than this are treated as scanned and OCRed (when Azure is set up).
MIN_DIGITAL_CHARS_PER_PAGE = 40
PAGE_SEPARATOR = "\n\n---\n\n"


def _format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.2f}s"
    m = int(seconds // 60)
    s = seconds - m * 60
    return f"{m}m {s:.2f}s"


# ===========================
# Inputs & environment
# ===========================

def _load_docx_text(path: str) -> str:
    """Guideline paragraphs, then table rows as 'cell | cell'."""
    doc = Document(path)
    parts = [p.text.strip() for p in doc.paragraphs if p.text and p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [" ".join(c.text.split()) for c in row.cells]
            cells = [c for c in cells if c]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def load_guidelines(path: str) -> str:
    """Marking guidelines from .docx, or any plain-text file (.txt, .md)."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Guidelines not found: {path}")
    if path.lower().endswith(".docx"):
        text = _load_docx_text(path)
    else:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    text = text.strip()
    if not text:
        raise ValueError(f"Guidelines file is empty: {path}")
    return text


def load_environment(env_file: Optional[str] = None) -> Tuple[str, Optional[DocumentAnalysisClient]]:
    """
    Grok key is always required. Azure credentials are optional (digital PDFs
    never need OCR), but a half-configured Azure pair is an error.
    """
    load_dotenv(env_file)

    grok_key = os.getenv("Grok_API")
    azure_endpoint = os.getenv("AZURE_ENDPOINT")
    azure_key = os.getenv("AZURE_KEY")

    missing = []
    if not grok_key:
        missing.append("Grok_API")
    if bool(azure_endpoint) != bool(azure_key):
        missing.append("AZURE_KEY" if azure_endpoint else "AZURE_ENDPOINT")

    if missing:
        raise EnvironmentError(
            f"Missing env vars in {env_file or '.env'}: {', '.join(missing)}"
        )

    doc_client = None
    if azure_endpoint and azure_key:
        doc_client = DocumentAnalysisClient(
            endpoint=azure_endpoint,
            credential=AzureKeyCredential(azure_key),
        )
    return grok_key, doc_client


def validate_input_paths(pdf_path: str, output_json_path: str) -> None:
    if not os.path.isfile(pdf_path):
        raise FileNotFoundError(f"PDF not found: {pdf_path}")

    with open(pdf_path, "rb") as f:
        if f.read(4) != b"%PDF":
            raise ValueError(f"Not a valid PDF: {pdf_path}")

    out_dir = os.path.dirname(output_json_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)


# ===========================
# Document text
# ===========================

def extract_pdf_text(pdf_path: str) -> List[Dict[str, Any]]:
    """Embedded (digital) text per page via PyMuPDF."""
    doc = fitz.open(pdf_path)
    try:
        return [
            {"page_number": idx + 1, "text": (doc[idx].get_text("text") or "").strip()}
            for idx in range(doc.page_count)
        ]
    finally:
        doc.close()


def pages_needing_ocr(pages: List[Dict[str, Any]]) -> List[int]:
    """Page numbers whose embedded text is too thin to trust (blank, cover or scanned pages)."""
    return [
        int(p["page_number"])
        for p in pages
        if len((p.get("text") or "").strip()) < MIN_DIGITAL_CHARS_PER_PAGE
    ]


def merge_pages(digital: List[Dict[str, Any]], ocr: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """OCR result replaces the digital page of the same number; page order is kept."""
    by_number = {p["page_number"]: p for p in digital}
    for p in ocr:
        by_number[p["page_number"]] = p
    return [by_number[n] for n in sorted(by_number)]


def run_ocr_on_pdf(
    doc_client: DocumentAnalysisClient,
    pdf_path: str,
    *,
    page_numbers: Optional[List[int]] = None,
    workers: int = 2,
    render_dpi: int = 220,
) -> List[Dict[str, Any]]:
    """Page-wise Azure OCR with retries on payload size. `page_numbers` (1-based) limits it to those pages."""

    def _encode_page(pil_img: Image.Image, scale: float, quality: int) -> bytes:
        img = pil_img.copy()
        if scale != 1.0:
            img = img.resize((max(1, int(img.width * scale)), max(1, int(img.height * scale))), Image.LANCZOS)
        if img.mode != "RGB":
            img = img.convert("RGB")
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=quality, optimize=True)
        return buf.getvalue()

    def _analyze(img_bytes: bytes) -> Any:
        poller = doc_client.begin_analyze_document("prebuilt-read", document=img_bytes)
        return poller.result()

    doc = fitz.open(pdf_path)
    try:
        pil_pages: List[Tuple[int, Image.Image]] = []
        wanted = set(page_numbers) if page_numbers is not None else None
        for idx in range(doc.page_count):
            if wanted is not None and idx + 1 not in wanted:
                continue
            pix = doc[idx].get_pixmap(dpi=render_dpi)
            pil_pages.append((idx + 1, Image.open(io.BytesIO(pix.tobytes("png")))))
    finally:
        doc.close()

    def _process(page_no: int, pil_img: Image.Image) -> Dict[str, Any]:
        attempts = [(1.0, 75), (0.85, 70), (0.7, 60)]
        result = None
        last_err: Optional[Exception] = None

        for scale, quality in attempts:
            try:
                result = _analyze(_encode_page(pil_img, scale=scale, quality=quality))
                break
            except HttpResponseError as e:
                last_err = e
                if "InvalidContentLength" in str(e):
                    continue
                raise

        if result is None:
            raise RuntimeError(f"OCR failed for page {page_no}: {last_err}")

        lines_out: List[str] = []
        for p in result.pages or []:
            for ln in p.lines or []:
                ltxt = (ln.content or "").strip()
                if ltxt:
                    lines_out.append(ltxt)

        return {
            "page_number": page_no,
            "text": "\n".join(lines_out).strip(),
            "lines": lines_out,
        }

    pages: List[Dict[str, Any]] = []
    with ThreadPoolExecutor(max_workers=max(1, int(workers or 1))) as ex:
        futures = {ex.submit(_process, pno, img): pno for pno, img in pil_pages}
        for fut in as_completed(futures):
            pages.append(fut.result())

    pages.sort(key=lambda x: x["page_number"])
    return pages


def build_document_text(pages: List[Dict[str, Any]]) -> str:
    ordered = sorted(pages, key=lambda p: int(p.get("page_number") or 0))
    return PAGE_SEPARATOR.join(p["text"] for p in ordered if (p.get("text") or "").strip())


# ===========================
# Feedback (Grok)
# ===========================

FEEDBACK_SCHEMA_HINT: Dict[str, Any] = {
    "overall_feedback": "General assessment summarizing strengths and weaknesses.",
    "passages": [
        {
            "referenced_student_text_quote": "The exact, full quote from the document. No ellipses.",
            "feedback": "Constructive feedback on the quote.",
            "quote_from_marking_guidelines": "Optional: the guideline text behind this feedback, or null.",
        }
    ],
    "examination": [
        {
            "area_of_examination": "e.g. Clarity of Research Question, Methodology, Literature Review",
            "assessment_comment": "Detailed comments on this area.",
            "suggestion for improvement": "Optional actionable suggestion, or null.",
            "assesment_category": " | ".join(EXAMINATION_CATEGORIES),
        }
    ],
}

_DOCUMENT_ROLES = {
    "proposal": "a first year PhD student's thesis proposal",
    "paper_draft": "an academic paper draft",
}

_HARSHNESS_RULES = {
    "mild": "Be encouraging and constructive; focus on the most important weaknesses.",
    "tough": "Be hard but constructive in your feedback, applying high academic standards.",
    "extremely_tough": (
        "Be very hard but constructive in your feedback, applying the highest academic standards. "
        "Do not let weak arguments, vague claims or missing evidence pass."
    ),
}


def build_feedback_system_prompt(guidelines: str, document_type: str = "proposal", harshness: str = "tough") -> str:
    if document_type not in _DOCUMENT_ROLES:
        raise ValueError(f"Unknown document type: {document_type}")
    if harshness not in _HARSHNESS_RULES:
        raise ValueError(f"Unknown harshness level: {harshness}")
    return (
        f"You are a professor that provides feedback on {_DOCUMENT_ROLES[document_type]}.\n\n"
        f"{_HARSHNESS_RULES[harshness]}\n\n"
        "Please provide overall feedback plus sentence/paragraph specific annotations. "
        "For the annotations, reference the FULL quote from the document that your annotation belongs to. "
        "Do NOT abbreviate with ... in between. ALWAYS return the full quote.\n"
        "Rate every examination area as exactly one of: "
        + ", ".join(f"'{c}'" for c in EXAMINATION_CATEGORIES)
        + ".\n"
        "Return JSON only, matching this schema:\n"
        + json.dumps(FEEDBACK_SCHEMA_HINT, ensure_ascii=False, indent=2)
        + "\n\nHere are your marking guidelines:\n\n"
        + guidelines
    )


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _normalize_category(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cat = " ".join(value.lower().split())
    return cat if cat in EXAMINATION_CATEGORIES else None


def validate_feedback_payload(raw: Any) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Turn the loosely typed model payload into checked structures.

    Returns (feedback, rejected):
      feedback = {"overall_feedback": str, "passages": [FeedbackItem], "examination": [dict]}
      rejected = [{"section", "index", "reason", "entry"}] for entries that were quarantined
    Raises ValueError when the payload shape itself is unusable.
    """
    if not isinstance(raw, dict):
        raise ValueError("Feedback JSON is not an object")
    overall = raw.get("overall_feedback")
    if not isinstance(overall, str):
        raise ValueError("Missing overall_feedback string")
    passages_raw = raw.get("passages")
    examination_raw = raw.get("examination")
    if not isinstance(passages_raw, list):
        raise ValueError("Missing passages list")
    if not isinstance(examination_raw, list):
        raise ValueError("Missing examination list")

    rejected: List[Dict[str, Any]] = []

    def _reject(section: str, index: int, reason: str, entry: Any) -> None:
        rejected.append({"section": section, "index": index, "reason": reason, "entry": entry})

    passages: List[FeedbackItem] = []
    for idx, p in enumerate(passages_raw):
        if not isinstance(p, dict):
            _reject("passages", idx, "not an object", p)
            continue
        quote = p.get("referenced_student_text_quote")
        comment = p.get("feedback")
        if not isinstance(quote, str) or not quote.strip():
            _reject("passages", idx, "missing quote", p)
            continue
        if not isinstance(comment, str) or not comment.strip():
            _reject("passages", idx, "missing feedback", p)
            continue
        passages.append(
            FeedbackItem(
                quote=quote,
                comment=comment.strip(),
                guideline_reference=_optional_text(p.get("quote_from_marking_guidelines")),
            )
        )

    examination: List[Dict[str, Any]] = []
    for idx, e in enumerate(examination_raw):
        if not isinstance(e, dict):
            _reject("examination", idx, "not an object", e)
            continue
        area = _optional_text(e.get("area_of_examination"))
        comment = _optional_text(e.get("assessment_comment"))
        category = _normalize_category(e.get("assesment_category", e.get("assessment_category")))
        if not area or not comment:
            _reject("examination", idx, "missing area or comment", e)
            continue
        if category is None:
            _reject("examination", idx, "unknown assessment category", e)
            continue
        examination.append(
            {
                "area": area,
                "comment": comment,
                "suggestion": _optional_text(
                    e.get("suggestion for improvement", e.get("suggestion_for_improvement"))
                ),
                "category": category,
            }
        )

    feedback = {
        "overall_feedback": overall.strip(),
        "passages": passages,
        "examination": examination,
    }
    return feedback, rejected


def call_grok_for_feedback(
    grok_api_key: str,
    document_text: str,
    guidelines: str,
    *,
    document_type: str = "proposal",
    harshness: str = "tough",
    model: str = DEFAULT_MODELS["feedback"]["model"],
    temperature: float = float(DEFAULT_MODELS["feedback"]["temperature"]),
    repair_model: str = DEFAULT_MODELS["json_repair"]["model"],
    repair_temperature: float = float(DEFAULT_MODELS["json_repair"]["temperature"]),
    max_attempts: int = 3,
) -> Dict[str, Any]:
    """
    Returns:
    {
      "feedback": {"overall_feedback", "passages": [FeedbackItem], "examination": [...]},
      "rejected": [...],
      "usage": {...},          # token counters, passed through as-is
      "reasoning": str | None  # model reasoning trace if the API returned one
    }
    """
    system = {"role": "system", "content": build_feedback_system_prompt(guidelines, document_type, harshness)}
    user = {"role": "user", "content": document_text}

    last_err: Optional[Exception] = None
    for attempt in range(max_attempts):
        try:
            resp = grok_chat(
                grok_api_key,
                messages=[system, user],
                model=model,
                temperature=temperature,
                max_tokens=8192,
                timeout=300,
                max_retries=4,
            )
            parsed = parse_json_with_repair(
                grok_api_key,
                message_content(resp),
                debug_tag=f"feedback_attempt{attempt + 1}",
                max_fix_attempts=2,
                repair_model=repair_model,
                repair_temperature=repair_temperature,
            )
            feedback, rejected = validate_feedback_payload(parsed)
        except Exception as e:
            print(f"  Feedback attempt {attempt + 1}/{max_attempts} failed: {e}")
            last_err = e
            continue

        message = resp["choices"][0]["message"]
        return {
            "feedback": feedback,
            "rejected": rejected,
            "usage": resp.get("usage") or {},
            "reasoning": message.get("reasoning_content") or None,
        }

    raise RuntimeError(f"Failed to get feedback from AI: {last_err}")


# ===========================
# Pipeline
# ===========================

def find_related_work(
    grok_api_key: str,
    document_text: str,
    document_type: str,
    *,
    model: str = DEFAULT_MODELS["search_terms"]["model"],
    temperature: float = float(DEFAULT_MODELS["search_terms"]["temperature"]),
) -> Dict[str, Any]:
    """Search terms + OpenAlex. Failures are reported, never raised: related work is advisory."""
    terms: List[str] = []
    try:
        terms = generate_search_terms(
            grok_api_key, document_text, document_type, model=model, temperature=temperature
        )
        result = search_openalex(terms, mailto=os.getenv("OPENALEX_MAILTO"))
    except Exception as e:
        print(f"  ⚠ Related work lookup failed: {e}")
        return {"search_terms": terms, "query": terms[0] if terms else "", "papers": [], "total": 0, "error": str(e)}
    result["search_terms"] = terms
    return result


def run_feedback(
    pdf_path: str,
    guidelines_path: str,
    output_json_path: str,
    *,
    env_file: Optional[str] = None,
    document_type: str = "proposal",
    harshness: str = "tough",
    force_ocr: bool = False,
    skip_related_work: bool = False,
    ocr_workers: int = 2,
    feedback_model: str = DEFAULT_MODELS["feedback"]["model"],
    feedback_temperature: float = float(DEFAULT_MODELS["feedback"]["temperature"]),
    search_terms_model: str = DEFAULT_MODELS["search_terms"]["model"],
    search_terms_temperature: float = float(DEFAULT_MODELS["search_terms"]["temperature"]),
    repair_model: str = DEFAULT_MODELS["json_repair"]["model"],
    repair_temperature: float = float(DEFAULT_MODELS["json_repair"]["temperature"]),
) -> Dict[str, Any]:
    validate_input_paths(pdf_path, output_json_path)
    guidelines = load_guidelines(guidelines_path)
    grok_key, doc_client = load_environment(env_file)

    timings: Dict[str, float] = {}
    t0_total = time.perf_counter()

    print("Extracting document text...")
    t0 = time.perf_counter()
    pages = extract_pdf_text(pdf_path)
    text_source = "pdf_text"
    ocr_pages = [p["page_number"] for p in pages] if force_ocr else pages_needing_ocr(pages)
    if ocr_pages:
        digital_pages = len(pages) - len(ocr_pages)
        if doc_client is not None:
            print(f"  Running Azure OCR on {len(ocr_pages)} page(s): {ocr_pages}")
            ocr = run_ocr_on_pdf(doc_client, pdf_path, page_numbers=ocr_pages, workers=ocr_workers)
            pages = merge_pages(pages, ocr)
            text_source = "ocr" if digital_pages == 0 else "mixed"
        elif force_ocr or not build_document_text(pages):
            raise EnvironmentError("PDF needs OCR but AZURE_ENDPOINT / AZURE_KEY are not set")
        else:
            # no Azure: keep whatever embedded text those pages have
            print(f"  ⚠ Azure not configured; using embedded text only for page(s) {ocr_pages}")
    document_text = build_document_text(pages)
    if not document_text:
        raise ValueError(f"No text could be extracted from {pdf_path}")
    timings["Text extraction"] = time.perf_counter() - t0
    print(f"Text extraction done in {_format_duration(timings['Text extraction'])} "
          f"({len(pages)} pages, {len(document_text)} chars, source={text_source})")

    related: Dict[str, Any] = {"search_terms": [], "query": "", "papers": [], "total": 0}
    if not skip_related_work:
        print("Looking up related work...")
        t0 = time.perf_counter()
        related = find_related_work(
            grok_key, document_text, document_type, model=search_terms_model, temperature=search_terms_temperature
        )
        timings["Related work"] = time.perf_counter() - t0
        print(f"Related work done in {_format_duration(timings['Related work'])} ({len(related['papers'])} papers)")

    print("Getting feedback from Grok...")
    t0 = time.perf_counter()
    fb_pack = call_grok_for_feedback(
        grok_key,
        document_text,
        guidelines,
        document_type=document_type,
        harshness=harshness,
        model=feedback_model,
        temperature=feedback_temperature,
        repair_model=repair_model,
        repair_temperature=repair_temperature,
    )
    timings["LLM feedback"] = time.perf_counter() - t0
    print(f"LLM feedback done in {_format_duration(timings['LLM feedback'])}")
    if fb_pack["rejected"]:
        print(f"  Quarantined {len(fb_pack['rejected'])} malformed feedback entries")

    print("Anchoring quotes...")
    t0 = time.perf_counter()
    feedback = fb_pack["feedback"]
    marked_text, annotations = annotate_document(document_text, feedback["passages"])
    timings["Quote anchoring"] = time.perf_counter() - t0
    matched = sum(1 for a in annotations if a.matched)
    print(f"Matched {matched} quotes, {len(annotations) - matched} unmatched")

    output = {
        "pdf": os.path.basename(pdf_path),
        "document_type": document_type,
        "harshness": harshness,
        "text_source": text_source,
        "page_count": len(pages),
        "document_text": document_text,
        "marked_text": marked_text,
        "overall_feedback": feedback["overall_feedback"],
        "annotations": [annotation_to_dict(a) for a in annotations],
        "examination": feedback["examination"],
        "rejected_entries": fb_pack["rejected"],
        "usage": fb_pack["usage"],
        "reasoning": fb_pack["reasoning"],
        "related_work": related,
        "model_config": {
            "feedback": {"model": feedback_model, "temperature": feedback_temperature},
            "search_terms": {"model": search_terms_model, "temperature": search_terms_temperature},
            "json_repair": {"model": repair_model, "temperature": repair_temperature},
        },
    }
    with open(output_json_path, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
    print(f"Saved JSON -> {output_json_path}")

    total_time = time.perf_counter() - t0_total
    print("\n" + "=" * 60)
    print("FEEDBACK TIMING SUMMARY")
    print("=" * 60)
    for k, v in timings.items():
        print(f"  {k}: {_format_duration(v)}")
    print("-" * 60)
    print(f"  Total: {_format_duration(total_time)}")
    print("=" * 60)

    output["timings"] = timings
    output["total_time"] = total_time
    output["json_path"] = output_json_path
    return output


def main() -> None:
    parser = argparse.ArgumentParser(description="Get AI feedback on an academic PDF and anchor it to the document text.")
    parser.add_argument("--pdf", required=True, help="Input PDF path")
    parser.add_argument("--guidelines", required=True, help="Marking guidelines (.docx, .txt or .md)")
    parser.add_argument("--output-json", default="feedback_result.json", help="Output JSON path")
    parser.add_argument("--env-file", default=".env", help="Env file path")
    parser.add_argument("--document-type", choices=DOCUMENT_TYPES, default="proposal")
    parser.add_argument("--harshness", choices=HARSHNESS_LEVELS, default="tough")
    parser.add_argument("--force-ocr", action="store_true", help="OCR even if the PDF has embedded text")
    parser.add_argument("--skip-related-work", action="store_true", help="Do not query OpenAlex")
    parser.add_argument("--ocr-workers", type=int, default=2, help="Parallel OCR worker count")
    parser.add_argument("--feedback-model", default=DEFAULT_MODELS["feedback"]["model"])
    parser.add_argument("--feedback-temperature", type=float, default=float(DEFAULT_MODELS["feedback"]["temperature"]))
    parser.add_argument("--search-terms-model", default=DEFAULT_MODELS["search_terms"]["model"])
    parser.add_argument("--search-terms-temperature", type=float, default=float(DEFAULT_MODELS["search_terms"]["temperature"]))
    parser.add_argument("--repair-model", default=DEFAULT_MODELS["json_repair"]["model"])
    parser.add_argument("--repair-temperature", type=float, default=float(DEFAULT_MODELS["json_repair"]["temperature"]))
    args = parser.parse_args()

    result = run_feedback(
        pdf_path=args.pdf,
        guidelines_path=args.guidelines,
        output_json_path=args.output_json,
        env_file=args.env_file,
        document_type=args.document_type,
        harshness=args.harshness,
        force_ocr=args.force_ocr,
        skip_related_work=args.skip_related_work,
        ocr_workers=args.ocr_workers,
        feedback_model=args.feedback_model,
        feedback_temperature=args.feedback_temperature,
        search_terms_model=args.search_terms_model,
        search_terms_temperature=args.search_terms_temperature,
        repair_model=args.repair_model,
        repair_temperature=args.repair_temperature,
    )
    print(f"\nDone. Feedback JSON: {result['json_path']}")


if __name__ == "__main__":
    main()
