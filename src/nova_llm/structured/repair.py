"""Best-effort syntactic repair of extracted JSON candidates.

Fixes run in a fixed order and each one only restores well-formedness of
text that is already there:

  1. strip-comments     ``//`` and ``/* */`` outside string literals
  2. trailing-commas    commas directly before ``}`` / ``]`` (or end of text)
  3. balance-brackets   append missing closers, innermost first
  4. normalize-escapes  undo templating over-escaping, fix invalid escapes

Unquoted keys and single-quoted strings are left alone; such text is a
different syntax, not formatting noise, and is allowed to fail parsing.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, NamedTuple

from ..exceptions import RepairError
from .types import Candidate

logger = logging.getLogger("nova-llm")

_OPENERS = {"{": "}", "[": "]"}
_MATCHING = {"}": "{", "]": "["}

# ``\n`` etc. count as whitespace in code regions of over-escaped payloads.
_TRAILING_COMMA_RE = re.compile(r",(?:\s|,|\\[ntr])*(?=[}\]])")
_DANGLING_COMMA_RE = re.compile(r",(?:\s|,|\\[ntr])*\Z")
_UNQUOTED_QUOTE_RE = re.compile(r'(?<!\\)"')
_OVER_ESCAPE_RE = re.compile(r'\\(["\\])')
_CODE_ESCAPE_RE = re.compile(r"\\[ntr]")
_STRING_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_CONTROL_CHARS = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


class _Scan(NamedTuple):
    tokens: list[tuple[str, str]]  # ("code" | "string" | "comment", raw text)
    string_open: bool  # text ends inside a string literal
    dangling: bool  # ...right after a backslash
    escaped: bool  # every quote is backslash-escaped


def _over_escaped(text: str) -> bool:
    return '\\"' in text and _UNQUOTED_QUOTE_RE.search(text) is None


def _units(text: str, escaped: bool) -> list[tuple[int, int, str]]:
    """Logical characters as (start, end, char).

    In over-escaped text ``\\"`` and ``\\\\`` are one logical character each,
    so the string state machine below works unchanged on both forms.
    """
    units = []
    i, n = 0, len(text)
    while i < n:
        if escaped and text[i] == "\\" and i + 1 < n and text[i + 1] in '"\\':
            units.append((i, i + 2, text[i + 1]))
            i += 2
        else:
            units.append((i, i + 1, text[i]))
            i += 1
    return units


def _scan(text: str) -> _Scan:
    escaped = _over_escaped(text)
    units = _units(text, escaped)
    m = len(units)
    tokens: list[tuple[str, str]] = []
    string_open = dangling = False

    def pos(k: int) -> int:
        return units[k][0] if k < m else len(text)

    code_start = 0
    k = 0
    while k < m:
        ch = units[k][2]
        nxt = units[k + 1][2] if k + 1 < m else ""

        if ch == '"':
            j = k + 1
            closed = False
            while j < m:
                c = units[j][2]
                if c == "\\":
                    j += 2
                    continue
                j += 1
                if c == '"':
                    closed = True
                    break
            if not closed:
                string_open = True
                dangling = j > m
            kind, end = "string", min(j, m)
        elif ch == "/" and nxt == "/":
            end = k + 2
            while end < m and units[end][2] != "\n":
                end += 1
            kind = "comment"
        elif ch == "/" and nxt == "*":
            end = k + 2
            while end < m and not (
                units[end][2] == "*" and end + 1 < m and units[end + 1][2] == "/"
            ):
                end += 1
            end = min(end + 2, m)
            kind = "comment"
        else:
            k += 1
            continue

        if pos(k) > code_start:
            tokens.append(("code", text[code_start : pos(k)]))
        tokens.append((kind, text[pos(k) : pos(end)]))
        code_start = pos(end)
        k = end

    if code_start < len(text):
        tokens.append(("code", text[code_start:]))
    return _Scan(tokens, string_open, dangling, escaped)


# ── fixes ────────────────────────────────────────────────


def _strip_comments(text: str) -> str:
    scan = _scan(text)
    return "".join(chunk for kind, chunk in scan.tokens if kind != "comment")


def _remove_trailing_commas(text: str) -> str:
    tokens = _scan(text).tokens
    out = []
    for idx, (kind, chunk) in enumerate(tokens):
        if kind == "code":
            chunk = _TRAILING_COMMA_RE.sub("", chunk)
            if idx == len(tokens) - 1:
                # Truncated output: a closer is about to be appended.
                chunk = _DANGLING_COMMA_RE.sub("", chunk)
        out.append(chunk)
    return "".join(out)


def _balance_brackets(text: str) -> str:
    scan = _scan(text)
    if scan.dangling:
        return text

    stack: list[str] = []
    for kind, chunk in scan.tokens:
        if kind != "code":
            continue
        for ch in chunk:
            if ch in _OPENERS:
                stack.append(ch)
            elif ch in _MATCHING and stack and stack[-1] == _MATCHING[ch]:
                stack.pop()
            # Excess or mismatched closers stay for the parser to reject.

    suffix = ""
    if scan.string_open:
        suffix += '\\"' if scan.escaped else '"'
    suffix += "".join(_OPENERS[c] for c in reversed(stack))
    return text + suffix


def _fix_escape(match: re.Match) -> str:
    seq = match.group(1)
    if seq == "'":
        return "'"
    if len(seq) == 5 or (seq in '"\\/bfnrt'):
        return "\\" + seq
    return "\\\\" + seq


def _normalize_escapes(text: str) -> str:
    while _over_escaped(text):
        text = _OVER_ESCAPE_RE.sub(r"\1", text)

    out = []
    for kind, chunk in _scan(text).tokens:
        if kind == "string":
            chunk = _STRING_ESCAPE_RE.sub(_fix_escape, chunk)
            for raw, esc in _CONTROL_CHARS.items():
                chunk = chunk.replace(raw, esc)
        elif kind == "code":
            chunk = _CODE_ESCAPE_RE.sub(" ", chunk)
        out.append(chunk)
    return "".join(out)


_FIXES = (
    ("strip-comments", _strip_comments),
    ("trailing-commas", _remove_trailing_commas),
    ("balance-brackets", _balance_brackets),
    ("normalize-escapes", _normalize_escapes),
)


def repair(candidate: str | Candidate) -> Candidate:
    """Apply all syntax fixes; never raises.

    The returned candidate lists the fixes that changed the text, appended
    to any history the input candidate already carried.
    """
    if isinstance(candidate, Candidate):
        text, fixes = candidate.text, list(candidate.fixes)
    else:
        text, fixes = candidate, []

    for name, fix in _FIXES:
        fixed = fix(text)
        if fixed != text and fixed.strip():
            fixes.append(name)
            text = fixed

    if fixes:
        logger.debug("Repaired JSON candidate: %s", ", ".join(fixes))
    return Candidate(text, fixes)


def parse_candidate(candidate: Candidate) -> Any:
    """Parse a candidate as JSON, raising RepairError on failure."""
    try:
        return json.loads(candidate.text)
    except json.JSONDecodeError as e:
        raise RepairError(f"Invalid JSON response from LLM: {e}") from e
