"""
Text Normalizer
Canonicalizes board text (unicode math glyphs, currency, separators) before parsing
"""

import re
from typing import Iterable, Optional, Tuple

from boardcheck.records import Step


_GLYPHS = (
    (re.compile(r"[–—−]"), "-"),      # – — −
    (re.compile(r"[×·⋅]"), "*"),      # × · ⋅
    (re.compile(r"÷"), "/"),                    # ÷
    (re.compile(r"√"), "sqrt"),                 # √
    (re.compile(r"π"), "pi"),                   # π
    (re.compile(r"µ"), "u"),                    # µ (micro sign only)
    (re.compile("\u2126"), "\u03a9"),           # ohm sign -> omega
    (re.compile(r"[≈＝﹦]"), "="),      # ≈ ＝ ﹦
    (re.compile(r"[$€£₹¥]"), ""),  # $ € £ ₹ ¥
)

# Bracketed lists, numeric tuples and labeled comma lists are left alone;
# anything else shaped like 1,234,567 loses its separators
_THOUSANDS = re.compile(
    r"\[[^\]]*\]"
    r"|\(\s*-?\d[\d.]*(?:\s*,\s*-?\d[\d.]*)+\s*\)"
    r"|\b(?:numbers|data|values|cash\s*flows|cf)\s*[:\-]\s*[-\d.,\s]*"
    r"|(?P<number>(?<![\d.,])\d{1,3}(?:,\d{3})+(?![\d,]|\.\d+,))",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")


def _strip_thousands(match: "re.Match") -> str:
    token = match.group(0)
    if match.group("number") is None:
        return token
    return token.replace(",", "")


class TextNormalizer:
    """
    Normalizes free text coming off the board into a consistent ASCII-like form.
    """

    @staticmethod
    def normalize(text: Optional[str]) -> str:
        """
        Map unicode operators to ASCII, drop currency and thousands separators,
        collapse whitespace. Idempotent.
        """
        if not text:
            return ""

        for pattern, replacement in _GLYPHS:
            text = pattern.sub(replacement, text)

        # 1,250,000 -> 1250000 (but not [100,200,300] or data: 100,200,300)
        text = _THOUSANDS.sub(_strip_thousands, text)

        return _WHITESPACE.sub(" ", text).strip()

    @classmethod
    def gather(cls, question: Optional[str], raw_text: Optional[str],
               steps: Optional[Iterable[Step]] = None) -> str:
        """
        Build the problem text: question, raw text, then every step's
        before/after/text/action, each normalized, one per line.
        """
        pieces = [question, raw_text]
        for step in steps or ():
            pieces.extend([step.before, step.after, step.text, step.action])

        normalized = (cls.normalize(p) for p in pieces if isinstance(p, str) and p.strip())
        return "\n".join(normalized)

    @staticmethod
    def validate_parentheses(expr: str) -> Tuple[bool, Optional[str]]:
        stack = []
        for i, c in enumerate(expr):
            if c == "(":
                stack.append(i)
            elif c == ")":
                if not stack:
                    return False, f"Unbalanced parenthesis: extra ')' at position {i}"
                stack.pop()

        if stack:
            return False, f"Unbalanced parenthesis: unclosed '(' at position {stack[0]}"

        return True, None

    @staticmethod
    def validate_characters(expr: str) -> Tuple[bool, Optional[str]]:
        """
        Only allow safe math characters
        """
        if not re.fullmatch(r"[0-9a-zA-Z_+\-*/=().,^\s]+", expr):
            return False, "Invalid characters in expression"
        return True, None


normalize_text = TextNormalizer.normalize
gather_problem_text = TextNormalizer.gather
