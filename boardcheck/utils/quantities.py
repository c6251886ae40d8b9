"""
Quantity Parsers
Labeled numbers, percentages, number lists and tolerance comparisons
"""

import math
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Union

from boardcheck.config import RESIDUAL_TOL
from boardcheck.records import Quantity
from boardcheck.utils.text_normalizer import normalize_text


NUM = r"(-?\d*\.?\d+(?:e[+-]?\d+)?)"

_NUMBER = re.compile(r"-?\d*\.?\d+(?:e[+-]?\d+)?", re.IGNORECASE)
_PERCENT = re.compile(r"(-?\d*\.?\d+(?:e[+-]?\d+)?)\s*%", re.IGNORECASE)
_BRACKET = re.compile(r"\[(.*?)\]")
_LABELED_LIST = re.compile(r"(?:numbers?|data|values?|cash\s*flows?|cf)\s*[:\-]\s*([^\n]+)", re.IGNORECASE)
# An unbracketed list ends at a sentence break or the next "label ="
_LIST_END = re.compile(r"[;.](?:\s|$)|\s[A-Za-z_]\w*\s*=")
_FINAL_LABEL = re.compile(r"^\s*([A-Za-zΔ][\w']*(?:\s*\([\w,\s]*\))?)\s*=")

# Unit windows stop at the next list separator or the next "label ="
_WINDOW_SIZE = 48
_WINDOW_STOP = re.compile(r"[,;\n]|\s(?:and|at|with)\s|[A-Za-zΔ_][\w]*\s*=")

PatternLike = Union[str, Pattern]


def _compile(pattern: PatternLike) -> Pattern:
    if isinstance(pattern, str):
        return re.compile(pattern, re.IGNORECASE)
    return pattern


# -------------------------
# Numbers
# -------------------------
def parse_number(s: Optional[str]) -> Optional[float]:
    """First numeric token in `s`, scientific notation included."""
    if not s:
        return None
    m = _NUMBER.search(str(s))
    if not m:
        return None
    try:
        return float(m.group(0))
    except ValueError:
        return None


def parse_percent_or_number(s: Optional[str]) -> Optional[float]:
    """Like parse_number, but `12.5%` becomes 0.125."""
    if not s:
        return None
    pct = _PERCENT.search(str(s))
    if pct:
        return float(pct.group(1)) / 100
    return parse_number(s)


def extract_number_list(text: str) -> List[float]:
    """
    Numbers from a bracketed list, or from a labeled list such as
    "data: 2, 4, 4" or "cash flows: -1000, 300". The labeled form wins.
    """
    t = normalize_text(text)
    bracket = _BRACKET.search(t)
    segment = bracket.group(1) if bracket else t

    labeled = _LABELED_LIST.search(t)
    if labeled:
        segment = labeled.group(1)
        inner = _BRACKET.search(segment)
        segment = inner.group(1) if inner else _LIST_END.split(segment, 1)[0]

    values = []
    for token in _NUMBER.findall(segment):
        try:
            value = float(token)
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    return values


# -------------------------
# Labeled values
# -------------------------
def _unit_window(text: str, start: int) -> str:
    window = text[start:start + _WINDOW_SIZE]
    stop = _WINDOW_STOP.search(window)
    return window[:stop.start()] if stop else window


def find_value(text: str, label: PatternLike, unit_hints: Sequence[PatternLike] = ()) -> Optional[Quantity]:
    """
    Find the first number captured by `label` (group 1) and the unit written
    right after it. The earliest unit hint in the trailing window wins.
    """
    m = _compile(label).search(text)
    if not m or not m.group(1):
        return None

    value = parse_number(m.group(1))
    if value is None:
        return None

    window = _unit_window(text, m.end(1))
    best = None
    for hint in unit_hints:
        um = _compile(hint).search(window)
        if um and (best is None or um.start() < best.start()):
            best = um
    if best is None:
        return Quantity(value)
    return Quantity(value, best.group(0).strip())


def find_number(text: str, *labels: PatternLike) -> Optional[float]:
    """Value for the first label pattern that matches a number."""
    for label in labels:
        m = _compile(label).search(text)
        if m and m.group(1) is not None:
            n = parse_number(m.group(1))
            if n is not None:
                return n
    return None


def find_percent(text: str, *labels: PatternLike) -> Optional[float]:
    """Like find_number, but honours a trailing `%` after the match."""
    for label in labels:
        m = _compile(label).search(text)
        if m and m.group(1) is not None:
            tail = text[m.start(1):m.end(1) + 2]
            n = parse_percent_or_number(tail)
            if n is not None:
                return n
    return None


def labeled(name: str) -> Pattern:
    """Pattern for `name = <number>` with `name` as a whole word."""
    return re.compile(rf"(?<![\w.]){name}\s*[:=]\s*{NUM}", re.IGNORECASE)


def labeled_cs(name: str) -> Pattern:
    """Case-sensitive variant, for symbols such as `M` vs `m`."""
    return re.compile(rf"(?<![\w.]){name}\s*[:=]\s*{NUM}")


def find_all_labeled(text: str, prefix: str) -> Dict[str, float]:
    """Indexed labels such as R1=.., R2=.. keyed by their index."""
    pattern = re.compile(rf"(?<![\w.]){prefix}(\d+)\s*=\s*{NUM}", re.IGNORECASE)
    found = {}
    for m in pattern.finditer(text):
        n = parse_number(m.group(2))
        if n is not None and m.group(1) not in found:
            found[m.group(1)] = n
    return found


def final_label(final: Optional[str]) -> Optional[str]:
    """Label of a reported answer like `I = 5 A` -> `I`."""
    if not final:
        return None
    m = _FINAL_LABEL.match(normalize_text(final))
    if not m:
        return None
    return re.sub(r"\s+", "", m.group(1))


# -------------------------
# Comparison helpers
# -------------------------
def _finite(*values) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def approx_equal(a: float, b: float, tol: float = RESIDUAL_TOL) -> bool:
    """Absolute comparison; non-finite inputs never match."""
    return _finite(a, b) and abs(a - b) <= tol


def rel_close(a: float, b: float, rtol: float = 1e-6, atol: float = 1e-6) -> bool:
    """Relative + absolute comparison (NumPy style, symmetric)."""
    if not _finite(a, b):
        return False
    return abs(a - b) <= atol + rtol * max(abs(a), abs(b))


def count_occurrences(text: str, patterns: Union[PatternLike, Iterable[PatternLike]]) -> int:
    """Total number of non-overlapping matches of one or more patterns."""
    if isinstance(patterns, (str, re.Pattern)):
        patterns = [patterns]
    return sum(len(_compile(p).findall(text)) for p in patterns)
