"""Best-effort recovery of a JSON object from model output.

Models wrap answers in markdown fences, add prose around them, leave trailing
commas, forget to quote keys, or get cut off by the token limit. The helpers
here fix those common malformations; anything still unparseable is a
``ParseError``.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from terms_analyzer.analysis.errors import ParseError

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_PY_LITERALS = {"None": "null", "True": "true", "False": "false"}


def _candidates(text: str) -> list[str]:
    """Strip fences and leading prose, then offer the object slice and the full tail."""
    text = _FENCE.sub("", text).strip()
    start = text.find("{")
    if start == -1:
        raise ParseError("No JSON object found in model output")
    tail = text[start:]
    end = tail.rfind("}")
    if end == -1:
        return [tail]
    sliced = tail[: end + 1]
    # a truncated reply may end after an inner '}', so the full tail is tried too
    return [sliced] if sliced == tail else [sliced, tail]


def _outside_strings(text: str, fn) -> str:
    """Apply ``fn`` to every segment of ``text`` that is not inside a string literal."""
    out: list[str] = []
    segment: list[str] = []
    quote = ""
    escaped = False
    for ch in text:
        if quote:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
            continue
        if ch in "\"'":
            out.append(fn("".join(segment)))
            segment = []
            quote = ch
            out.append(ch)
            continue
        segment.append(ch)
    out.append(fn("".join(segment)))
    return "".join(out)


def _fix_bare_tokens(segment: str) -> str:
    segment = _UNQUOTED_KEY.sub(r'\1"\2"\3', segment)
    for py, js in _PY_LITERALS.items():
        segment = re.sub(rf"\b{py}\b", js, segment)
    return segment


def _single_to_double_quotes(text: str) -> str:
    out: list[str] = []
    in_double = False
    in_single = False
    escaped = False
    for ch in text:
        if escaped:
            out.append(ch)
            escaped = False
            continue
        if ch == "\\" and (in_double or in_single):
            out.append(ch)
            escaped = True
            continue
        if ch == '"' and not in_single:
            in_double = not in_double
        elif ch == '"' and in_single:
            out.append('\\"')
            continue
        elif ch == "'" and not in_double:
            in_single = not in_single
            out.append('"')
            continue
        out.append(ch)
    return "".join(out)


def _close_open_structures(text: str) -> str:
    """Terminate an unfinished string and append missing closing brackets."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            stack.append("}" if ch == "{" else "]")
        elif ch in "}]" and stack and stack[-1] == ch:
            stack.pop()

    if in_string:
        text += '"'
    text = text.rstrip()
    # a key cut off before its value cannot be completed
    text = re.sub(r'([{,])\s*"[^"]*"\s*:\s*$', r"\1", text)
    text = re.sub(r",\s*$", "", text)
    return text + "".join(reversed(stack))


def repair_json(text: str) -> str:
    """Fix common malformations in a JSON object string."""
    text = _single_to_double_quotes(text)
    text = _outside_strings(text, _fix_bare_tokens)
    text = _close_open_structures(text)
    text = _outside_strings(text, lambda seg: _TRAILING_COMMA.sub(r"\1", seg))
    return text


def parse_model_json(text: str) -> dict[str, Any]:
    """Parse the model's reply into a dict, repairing it if strict parsing fails."""
    if not text or not text.strip():
        raise ParseError("Empty response from model")

    candidates = _candidates(text)
    try:
        data = json.loads(candidates[0])
    except json.JSONDecodeError as exc:
        last_error: Exception = exc
        data = None
        for candidate in candidates:
            try:
                data = json.loads(repair_json(candidate))
                break
            except json.JSONDecodeError as repair_exc:
                last_error = repair_exc
        if data is None:
            raise ParseError(f"Model returned invalid JSON: {last_error}") from last_error
        logger.warning("Model output required JSON repair")

    if not isinstance(data, dict):
        raise ParseError("Model output is not a JSON object")
    return data
