"""
Candidate Extractor
Turns a reported final answer into concrete variable assignments to check
"""

import itertools
import re
from typing import Dict, List, Optional, Sequence, Tuple

from boardcheck.records import Candidate
from boardcheck.tools.calculator import Calculator
from boardcheck.utils.text_normalizer import normalize_text


_BRACKET_LITERAL = re.compile(r"^\s*(?:[A-Za-z]\w*\s*=\s*)?(\[.*\])\s*$")
_TUPLE = re.compile(r"^\s*(?:\(([A-Za-z,\s]+)\)\s*=\s*)?\(([^()]*,[^()]*)\)\s*$")
_LABEL = re.compile(r"(?<![\w.])([A-Za-z][A-Za-z0-9_]*)\s*=")
_PLUS_MINUS = re.compile(r"^(.*?)(?:\+/-|±|\+-)(.*)$")
_SEPARATORS = re.compile(r"\s+or\s+|\s+and\s+|[,;]")


def _value(token: str) -> Optional[float]:
    token = token.strip().rstrip(".")
    if not token:
        return None
    return Calculator.evaluate(token)


def _split_values(segment: str) -> List[float]:
    """
    Values in one segment: "2 or -3", "1, 2", "3 ± sqrt(2)", "3/4".
    """
    values = []
    for token in _SEPARATORS.split(segment):
        token = token.strip()
        if not token:
            continue
        pm = _PLUS_MINUS.match(token)
        if pm:
            base, delta = _value(pm.group(1) or "0"), _value(pm.group(2))
            if base is not None and delta is not None:
                values.extend([base + delta, base - delta])
            continue
        value = _value(token)
        if value is None:
            # trailing unit or words: keep the leading numeric part
            m = re.match(r"\s*(-?\d*\.?\d+(?:e[+-]?\d+)?)", token, re.IGNORECASE)
            value = float(m.group(1)) if m else None
        if value is not None:
            values.append(value)
    return values


def _parse_literal(text: str) -> Optional[Tuple[Tuple[float, ...], ...]]:
    """[1, 2] or [[1, 2], [3, 4]] -> rows of floats."""
    body = text.strip()
    if body.startswith("[[") or re.search(r"\]\s*,?\s*\[", body):
        rows = re.findall(r"\[([^\[\]]*)\]", body)
    else:
        rows = [body.strip("[]")]

    parsed = []
    for row in rows:
        values = []
        for token in row.split(","):
            if not token.strip():
                continue
            value = _value(token)
            if value is None:
                return None
            values.append(value)
        if values:
            parsed.append(tuple(values))
    return tuple(parsed) or None


def _grouped_by_label(text: str, default: str) -> Dict[str, List[float]]:
    labels = list(_LABEL.finditer(text))
    groups: Dict[str, List[float]] = {}
    if not labels:
        groups[default] = _split_values(text)
        return groups

    for i, m in enumerate(labels):
        end = labels[i + 1].start() if i + 1 < len(labels) else len(text)
        segment = text[m.end():end]
        values = groups.setdefault(m.group(1), [])
        for v in _split_values(segment):
            if v not in values:
                values.append(v)
    return groups


def candidates_from_final(final_text: Optional[str], variables: Sequence[str] = ()) -> List[Candidate]:
    """
    Every concrete assignment the final answer could mean.

    Multi-variable answers give the Cartesian product of the per-variable
    values, deduplicated on the value tuple.
    """
    text = normalize_text(final_text)
    if not text:
        return []

    literal = _BRACKET_LITERAL.match(text)
    if literal:
        rows = _parse_literal(literal.group(1))
        if rows is None:
            return []
        return [Candidate(assignment={}, label=text, literal=rows)]

    default = variables[0] if variables else "x"

    tup = _TUPLE.match(text)
    if tup:
        names = [n.strip() for n in (tup.group(1) or "").split(",") if n.strip()]
        values = [_value(v) for v in tup.group(2).split(",")]
        if any(v is None for v in values):
            return []
        names = names or list(variables) or [f"x{i + 1}" for i in range(len(values))]
        if len(names) != len(values):
            return [Candidate(assignment={}, label=text, literal=(tuple(values),))]
        return [Candidate(assignment=dict(zip(names, values)), label=text)]

    groups = {k: v for k, v in _grouped_by_label(text, default).items() if v}
    if not groups:
        return []

    names = list(groups)
    seen = set()
    candidates = []
    for combo in itertools.product(*(groups[n] for n in names)):
        key = tuple(combo)
        if key in seen:
            continue
        seen.add(key)
        assignment = dict(zip(names, combo))
        label = ", ".join(f"{n}={v:g}" for n, v in assignment.items())
        candidates.append(Candidate(assignment=assignment, label=label))
    return candidates
