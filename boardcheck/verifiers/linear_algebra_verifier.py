"""
Linear Algebra Verifier
Determinant, rank, linear solves, inverse, trace, transpose, 2x2 eigenvalues and vector products
"""

import re
from typing import List, Optional

import numpy as np

from boardcheck.config import DOMAIN_EPS, LOOSE, STANDARD, Tolerance
from boardcheck.records import Check, Problem
from boardcheck.utils.candidates import candidates_from_final
from boardcheck.utils.text_normalizer import normalize_text
from boardcheck.verifiers.base import CheckCollector, Verifier, reported_value

PIVOT_EPS = 1e-9

_NUMBER = re.compile(r"-?\d*\.?\d+(?:e[+-]?\d+)?", re.IGNORECASE)
# One bracket level of nesting: [1 2; 3 4] or [[1, 2], [3, 4]]
_MATRIX = r"\[(?:[^\[\]]|\[[^\[\]]*\])*\]"
_ANY_MATRIX = re.compile(_MATRIX)
_VECTOR = re.compile(r"[\[(<]\s*(-?\d*\.?\d+(?:e[+-]?\d+)?(?:\s*[,\s]\s*-?\d*\.?\d+(?:e[+-]?\d+)?)+)\s*[\])>]",
                     re.IGNORECASE)
_LIST_SEPARATORS = re.compile(r"\s+or\s+|\s+and\s+|[,;]", re.IGNORECASE)


# -------------------------
# Parsing
# -------------------------
def _numbers(s: str) -> List[float]:
    return [float(t) for t in _NUMBER.findall(s)]


def parse_matrix(chunk: str) -> Optional[np.ndarray]:
    """
    Rows from `[[1, 2], [3, 4]]` or `[1 2; 3 4]`.
    Ragged input gives None.
    """
    body = chunk.strip()
    inner = re.findall(r"\[([^\[\]]*)\]", body[1:-1]) if body.startswith("[") else []
    if inner:
        rows = inner
    else:
        rows = [r for r in re.split(r"[;\n]", body.strip("[]")) if r.strip()]
    parsed = [_numbers(r) for r in rows]
    parsed = [r for r in parsed if r]
    if not parsed or any(len(r) != len(parsed[0]) for r in parsed):
        return None
    return np.array(parsed, dtype=float)


def find_matrix(text: str, label: str = "A") -> Optional[np.ndarray]:
    m = re.search(rf"(?<![\w.]){label}\s*=\s*({_MATRIX})", text)
    if not m:
        return None
    return parse_matrix(m.group(1))


def find_matrices(text: str) -> List[np.ndarray]:
    """Every bracketed block with at least two rows."""
    found = []
    for m in _ANY_MATRIX.finditer(text):
        M = parse_matrix(m.group(0))
        if M is not None and M.shape[0] > 1:
            found.append(M)
    return found


def find_vector(text: str, label: str) -> Optional[np.ndarray]:
    m = re.search(rf"(?<![\w.]){label}\s*=\s*", text)
    if not m:
        return None
    v = _VECTOR.match(text, m.end())
    return None if v is None else np.array(_numbers(v.group(1)), dtype=float)


def find_vectors(text: str) -> List[np.ndarray]:
    """Flat vectors in order of appearance, skipping the rows of a matrix."""
    spans = [m.span() for m in _ANY_MATRIX.finditer(text) if parse_matrix(m.group(0)) is not None
             and "[" in m.group(0)[1:-1]]
    found = []
    for m in _VECTOR.finditer(text):
        if any(a <= m.start() < b for a, b in spans):
            continue
        found.append(np.array(_numbers(m.group(1)), dtype=float))
    return found


def reported_array(final: Optional[str]) -> Optional[np.ndarray]:
    """
    Vector or matrix answer: a bracket or tuple literal, or several labeled
    values (`x=1, y=2`) taken in order.
    """
    text = normalize_text(final)
    if not text:
        return None
    block = _ANY_MATRIX.search(text)
    if block:
        M = parse_matrix(block.group(0))
        if M is not None:
            return M[0] if M.shape[0] == 1 else M
    v = _VECTOR.search(text)
    if v:
        return np.array(_numbers(v.group(1)), dtype=float)
    candidates = candidates_from_final(text)
    if len(candidates) == 1 and len(candidates[0].assignment) > 1:
        return np.array(list(candidates[0].assignment.values()), dtype=float)
    return None


def reported_values(final: Optional[str]) -> List[float]:
    """Each value of a list answer: `2 and 5`, `2, 3`, `λ1 = 2, λ2 = 3`."""
    text = normalize_text(final).strip("()[]{} ")
    values = []
    for part in _LIST_SEPARATORS.split(text):
        value = reported_value(part)
        if value is not None:
            values.append(value)
    return values


# -------------------------
# Elimination
# -------------------------
def determinant(A: np.ndarray) -> Optional[float]:
    """Gaussian elimination with partial pivoting."""
    n, m = A.shape
    if n != m:
        return None
    M = A.astype(float).copy()
    det = 1.0
    for i in range(n):
        p = i + int(np.argmax(np.abs(M[i:, i])))
        if abs(M[p, i]) < PIVOT_EPS:
            return 0.0
        if p != i:
            M[[i, p]] = M[[p, i]]
            det = -det
        det *= M[i, i]
        M[i + 1:] -= np.outer(M[i + 1:, i] / M[i, i], M[i])
    return float(det)


def rank(A: np.ndarray, tol: Optional[float] = None) -> int:
    """Number of pivots found by row reduction."""
    M = A.astype(float).copy()
    if M.size == 0:
        return 0
    rows, cols = M.shape
    if tol is None:
        tol = max(1e-10, float(np.max(np.abs(M))) * 1e-12)
    r = 0
    for c in range(cols):
        if r >= rows:
            break
        p = r + int(np.argmax(np.abs(M[r:, c])))
        if abs(M[p, c]) <= tol:
            continue
        M[[r, p]] = M[[p, r]]
        M[r] /= M[r, c]
        M[r + 1:] -= np.outer(M[r + 1:, c], M[r])
        r += 1
    return r


def gauss_jordan(augmented: np.ndarray, n: int) -> Optional[np.ndarray]:
    """Reduce the left n x n block to the identity; None when it is singular."""
    M = augmented.astype(float).copy()
    for i in range(n):
        p = i + int(np.argmax(np.abs(M[i:, i])))
        if abs(M[p, i]) < PIVOT_EPS:
            return None
        M[[i, p]] = M[[p, i]]
        M[i] /= M[i, i]
        others = np.arange(n) != i
        M[others] -= np.outer(M[others, i], M[i])
    return M[:, n:]


def solve(A: np.ndarray, b: np.ndarray) -> Optional[np.ndarray]:
    n, m = A.shape
    if n != m or b.shape[0] != n:
        return None
    result = gauss_jordan(np.column_stack([A, b]), n)
    return None if result is None else result[:, 0]


def inverse(A: np.ndarray) -> Optional[np.ndarray]:
    n, m = A.shape
    if n != m:
        return None
    return gauss_jordan(np.hstack([A, np.eye(n)]), n)


def eigenvalues_2x2(A: np.ndarray) -> Optional[List[float]]:
    """Real eigenvalues of a 2x2 matrix, larger first; None when complex."""
    if A.shape != (2, 2):
        return None
    tr = A[0, 0] + A[1, 1]
    det = A[0, 0] * A[1, 1] - A[0, 1] * A[1, 0]
    disc = tr * tr - 4 * det
    if disc < -1e-10:
        return None
    s = float(np.sqrt(max(0.0, disc)))
    return [(tr + s) / 2, (tr - s) / 2]


def projection(a: np.ndarray, b: np.ndarray) -> Optional[np.ndarray]:
    """Vector projection of a onto b."""
    bb = float(np.dot(b, b))
    if bb <= DOMAIN_EPS:
        return None
    return float(np.dot(a, b)) / bb * b


def arrays_close(computed: np.ndarray, reported: np.ndarray, tol: Tolerance = LOOSE) -> bool:
    if computed.shape != reported.shape:
        return False
    return bool(np.allclose(computed, reported, rtol=tol.rtol, atol=tol.abs_tol))


def _label(name: str, values: np.ndarray) -> str:
    return f"{name}={np.round(values, 6).tolist()}"


class LinearAlgebraVerifier(Verifier):
    """
    Matrices and vectors written as bracket literals.

    `A = [...]` and `b = [...]` labels are preferred; otherwise the first
    block of the right shape is used.
    """

    name = "linear_algebra"
    subject = "linear-algebra"
    method = "linear-algebra"
    trigger = re.compile(
        r"\b(matrix|matrices|det|determinant|inverse|rank|eigen\w*|trace|transpose|linear\s*system|"
        r"dot\s*product|cross\s*product|projection|proj|norm|magnitude\s+of\s+(?:the\s+)?vector|rref)\b|"
        r"\|\s*A\s*\||\bA\s*=\s*\[|\bAx\s*=\s*b\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(matrix|matrices|determinant|inverse|rank|eigenvalues?|trace|transpose)\b",
        r"\b(dot|cross)\s*product|\bprojection\b|\bnorm\b|\bvectors?\b",
        r"\ba\s*=\s*\[|\bax\s*=\s*b\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        answer = reported_array(final)
        scalar = reported_value(final) if answer is None else None

        A = find_matrix(text, "A")
        matrices = find_matrices(text)
        square = A if A is not None and A.shape[0] == A.shape[1] else next(
            (M for M in matrices if M.shape[0] == M.shape[1]), None)

        if square is not None and square.shape == (2, 2) and re.search(r"eigen|\beigs?\b", lower):
            self._check_eigenvalues(square, final, answer, collector)
            return

        if scalar is not None:
            self._check_scalars(lower, A, matrices, square, scalar, collector)
        if answer is not None:
            self._check_arrays(text, lower, A, matrices, square, answer, collector)
        self._check_vectors(text, lower, answer, scalar, collector)

    # -------------------------
    # Eigenvalues
    # -------------------------
    def _check_eigenvalues(self, square: np.ndarray, final: Optional[str], answer,
                           collector: CheckCollector) -> None:
        """Every reported value must be an eigenvalue; a pair must match in either order."""
        eigs = eigenvalues_2x2(square)
        if eigs is None:
            return
        if answer is not None and answer.ndim == 1:
            values = [float(v) for v in answer]
        else:
            values = reported_values(final)
        if not values:
            return

        if len(values) == 1:
            nearest = min(eigs, key=lambda e: abs(e - values[0]))
            collector.compare("λ", nearest, values[0], STANDARD, "eigenvalue mismatch (2x2)",
                              aliases=("lambda", "λ1", "λ2", "lambda1", "lambda2", "eigenvalue", "eigenvalues"))
            return

        reported = np.sort(np.array(values))[::-1]
        ok = len(values) == 2 and arrays_close(np.array(eigs), reported)
        collector.add(Check(label=_label("λ", reported), ok=ok, lhs=eigs[0], rhs=float(reported[0]),
                            reason=None if ok else "eigenvalues mismatch (2x2)"))

    # -------------------------
    # Scalar answers
    # -------------------------
    def _check_scalars(self, lower: str, A, matrices, square, rep: float, collector: CheckCollector) -> None:
        if square is not None and re.search(r"\bdet\b|determinant|\|\s*a\s*\|", lower):
            collector.compare("det", determinant(square), rep, STANDARD, "determinant mismatch",
                              aliases=("det(a)", "|a|", "d"))

        if re.search(r"\brank\b", lower):
            M = A if A is not None else (matrices[0] if matrices else None)
            if M is not None:
                collector.compare("rank", float(rank(M)), rep, STANDARD, "rank mismatch", aliases=("r", "rank(a)"))

        if square is not None and re.search(r"\btrace\b|\btr\s*\(", lower):
            collector.compare("tr", float(np.trace(square)), rep, STANDARD, "trace mismatch",
                              aliases=("trace", "tr(a)"))

    # -------------------------
    # Vector and matrix answers
    # -------------------------
    def _check_arrays(self, text: str, lower: str, A, matrices, square, answer: np.ndarray,
                      collector: CheckCollector) -> None:
        if square is not None and answer.ndim == 1 and re.search(r"\bax\s*=\s*b\b|\bsolve\b|\bsolution\b|"
                                                                 r"linear\s*system", lower):
            b = find_vector(text, "b")
            if b is None:
                b = next((v for v in find_vectors(text) if v.shape[0] == square.shape[0]), None)
            if b is not None:
                x = solve(square, b)
                if x is not None:
                    ok = arrays_close(x, answer)
                    collector.add(Check(label=_label("x", answer), ok=ok, lhs=float(x[0]), rhs=float(answer[0]),
                                        reason=None if ok else "Ax=b solution mismatch"))

        if answer.ndim == 2 and re.search(r"\binverse\b|\ba\^\(?-1\)?|a⁻¹", lower):
            M = square
            if A is None:
                M = next((N for N in matrices if N.shape[0] == N.shape[1] and not arrays_close(N, answer)), None)
            if M is not None:
                inv = inverse(M)
                if inv is None:
                    collector.fail("A^-1", "matrix is singular", float(answer.flat[0]))
                else:
                    ok = arrays_close(inv, answer)
                    collector.add(Check(label=_label("A^-1", answer), ok=ok, lhs=float(inv[0, 0]),
                                        rhs=float(answer[0, 0]), reason=None if ok else "inverse mismatch"))

        if answer.ndim == 2 and re.search(r"\btranspose\b|a\^t\b|aᵀ", lower):
            M = A if A is not None else next((N for N in matrices if not arrays_close(N, answer)), None)
            if M is not None:
                ok = arrays_close(M.T, answer, STANDARD)
                collector.add(Check(label=_label("A^T", answer), ok=ok, lhs=float(M.T[0, 0]),
                                    rhs=float(answer[0, 0]), reason=None if ok else "transpose mismatch"))

    # -------------------------
    # Vector products
    # -------------------------
    def _check_vectors(self, text: str, lower: str, answer, scalar, collector: CheckCollector) -> None:
        named = [find_vector(text, n) for n in ("u", "v")]
        if any(v is None for v in named):
            named = [find_vector(text, n) for n in ("a", "b")]
        pair = named if all(v is not None for v in named) else find_vectors(text)[:2]
        has_pair = len(pair) == 2 and pair[0].shape == pair[1].shape

        if scalar is not None and has_pair and re.search(r"dot\s*product|scalar\s*product|\b[au]\s*[.*]\s*[bv]\b",
                                                         lower):
            collector.compare("dot", float(np.dot(pair[0], pair[1])), scalar, STANDARD, "dot product mismatch",
                              aliases=("a.b", "u.v", "a*b", "u*v"))

        if scalar is not None and re.search(r"\bnorm\b|magnitude|length\s+of|\|\|", lower):
            vectors = find_vectors(text)
            if vectors:
                collector.compare("||v||", float(np.linalg.norm(vectors[0])), scalar, STANDARD, "norm mismatch",
                                  aliases=("|v|", "norm", "magnitude", "||u||", "||a||"))

        if answer is None or answer.ndim != 1 or not has_pair:
            return
        a, b = pair

        if a.shape[0] == 3 and re.search(r"cross\s*product|\ba\s*[x*]\s*b\b|\bu\s*[x*]\s*v\b", lower):
            computed = np.cross(a, b)
            ok = arrays_close(computed, answer, STANDARD)
            collector.add(Check(label=_label("a×b", answer), ok=ok, lhs=float(computed[0]), rhs=float(answer[0]),
                                reason=None if ok else "cross product mismatch"))

        if re.search(r"projection|\bproj", lower):
            computed = projection(a, b)
            if computed is not None:
                ok = arrays_close(computed, answer)
                collector.add(Check(label=_label("proj", answer), ok=ok, lhs=float(computed[0]),
                                    rhs=float(answer[0]), reason=None if ok else "projection mismatch"))
