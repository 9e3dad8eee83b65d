# grok_client.py
"""
Small xAI Grok chat client shared by the feedback and related-work steps.

- grok_chat: one chat completion, retried on 429/5xx and dropped connections
- parse_json_with_repair: read JSON out of a reply; if it is broken, let Grok fix it

Raw and repaired replies are dumped under debug_llm/ for inspection.
"""

import json
import os
import re
import time
from typing import Any, Dict, List, Optional

import requests


GROK_CHAT_URL = "https://api.x.ai/v1/chat/completions"
DEFAULT_GROK_MODEL = "grok-4-1-fast-reasoning"
DEBUG_LLM_DIR = "debug_llm"

RETRY_STATUS = {429, 500, 502, 503, 504}
MAX_BACKOFF_SECONDS = 60.0

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9]*\n?|\n?```$")

_REPAIR_SYSTEM = "You are a JSON repair engine. Return valid JSON only."
_REPAIR_PROMPT = "Repair the following malformed JSON. Return valid JSON only, no explanations or markdown."


def clean_json_from_llm(text: str) -> str:
    """Reply text without surrounding markdown fences."""
    return _FENCE_RE.sub("", (text or "").strip()).strip()


def extract_json_candidate(text: str, opening: str = "{", closing: str = "}") -> str:
    """Outermost opening...closing slice of the reply, or the cleaned reply if there is none."""
    s = clean_json_from_llm(text)
    start, end = s.find(opening), s.rfind(closing)
    return s[start : end + 1] if 0 <= start < end else s


def _backoff(attempt: int) -> float:
    return min(MAX_BACKOFF_SECONDS, 2.0 ** attempt)


def grok_chat(
    grok_api_key: str,
    messages: List[Dict[str, str]],
    model: str = DEFAULT_GROK_MODEL,
    temperature: float = 0.12,
    max_tokens: Optional[int] = None,
    timeout: int = 180,
    max_retries: int = 8,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"model": model, "messages": messages, "temperature": temperature}
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    headers = {"Content-Type": "application/json", "Authorization": f"Bearer {grok_api_key}"}

    for attempt in range(max_retries + 1):
        last_try = attempt == max_retries
        try:
            resp = requests.post(GROK_CHAT_URL, headers=headers, json=payload, timeout=(30, timeout))
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if last_try:
                raise
            print(f"  Grok request failed ({e.__class__.__name__}), retry {attempt + 1}/{max_retries}")
            time.sleep(_backoff(attempt))
            continue

        if resp.status_code < 300:
            return resp.json()
        if resp.status_code not in RETRY_STATUS or last_try:
            raise RuntimeError(f"Grok API error {resp.status_code}: {resp.text}")
        print(f"  Grok {resp.status_code}, retry {attempt + 1}/{max_retries}")
        time.sleep(_backoff(attempt))

    raise RuntimeError("Grok request failed: no attempts made")


def message_content(response: Dict[str, Any]) -> str:
    return str(response["choices"][0]["message"].get("content") or "")


def _dump(debug_dir: str, name: str, text: Optional[str]) -> None:
    with open(os.path.join(debug_dir, name), "w", encoding="utf-8") as f:
        f.write(text or "")


def parse_json_with_repair(
    grok_api_key: str,
    raw_text: str,
    *,
    debug_tag: str,
    max_fix_attempts: int = 2,
    repair_model: str = DEFAULT_GROK_MODEL,
    repair_temperature: float = 0.0,
    debug_dir: str = DEBUG_LLM_DIR,
) -> Any:
    os.makedirs(debug_dir, exist_ok=True)
    _dump(debug_dir, f"{debug_tag}_raw.txt", raw_text)

    text = raw_text
    for fix in range(max_fix_attempts + 1):
        if fix:
            reply = grok_chat(
                grok_api_key,
                messages=[
                    {"role": "system", "content": _REPAIR_SYSTEM},
                    {"role": "user", "content": f"{_REPAIR_PROMPT}\n\n{text or ''}"},
                ],
                model=repair_model,
                temperature=repair_temperature,
                max_tokens=2500,
            )
            text = message_content(reply)
            _dump(debug_dir, f"{debug_tag}_repaired_attempt{fix}.txt", text)
        try:
            return json.loads(extract_json_candidate(text))
        except ValueError as e:
            last_err = e

    raise ValueError(f"Could not parse JSON after repair attempts: {last_err}")
