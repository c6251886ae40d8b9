"""
Economics Verifier
Linear supply and demand, surplus, elasticity, taxes and price controls, plus the standard macro identities
"""

import re
from typing import NamedTuple, Optional, Tuple

from boardcheck.config import DOMAIN_EPS, RATE, STANDARD, TIGHT
from boardcheck.records import Problem
from boardcheck.utils.quantities import NUM, find_number, find_percent, labeled, labeled_cs
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, reported_rate, reported_value


class Curve(NamedTuple):
    """Inverse form P = intercept + slope * Q."""
    intercept: float
    slope: float

    def price(self, q: float) -> float:
        return self.intercept + self.slope * q

    def quantity(self, p: float) -> Optional[float]:
        if abs(self.slope) < DOMAIN_EPS:
            return None
        return (p - self.intercept) / self.slope


def _from_q_of_p(a: float, b: float) -> Optional[Curve]:
    """Q = a + b P rewritten as P(Q)."""
    if abs(b) < DOMAIN_EPS:
        return None
    return Curve(-a / b, 1 / b)


_SIGNED = r"([+-])\s*" + NUM.replace("(-?", "(")
_Q_OF_P = re.compile(rf"(?<![\w.])(Q_?[ds]?)\s*=\s*{NUM}\s*{_SIGNED}\s*\*?\s*P\b", re.IGNORECASE)
_P_OF_Q = re.compile(rf"(?<![\w.])P_?([ds]?)\s*=\s*{NUM}\s*{_SIGNED}\s*\*?\s*Q\b", re.IGNORECASE)


def parse_curves(text: str) -> Tuple[Optional[Curve], Optional[Curve]]:
    """
    (demand, supply) from lines like `Qd = 100 - 2P`, `Qs = -20 + 3P` or
    `P = 50 - 0.5Q`. An unlabeled inverse curve is bound by a nearby
    "demand"/"supply" word, else by the sign of its slope.
    """
    demand = supply = None
    for m in _Q_OF_P.finditer(text):
        label = m.group(1).lower().replace("_", "")
        b = float(m.group(4)) * (-1 if m.group(3) == "-" else 1)
        curve = _from_q_of_p(float(m.group(2)), b)
        if curve is None:
            continue
        if label == "qd" and demand is None:
            demand = curve
        elif label == "qs" and supply is None:
            supply = curve

    unbound = []
    for m in _P_OF_Q.finditer(text):
        slope = float(m.group(4)) * (-1 if m.group(3) == "-" else 1)
        curve = Curve(float(m.group(2)), slope)
        tag = m.group(1).lower()
        context = text[max(0, m.start() - 40):m.end() + 20].lower()
        if (tag == "d" or (not tag and "demand" in context and "supply" not in context)) and demand is None:
            demand = curve
        elif (tag == "s" or (not tag and "supply" in context and "demand" not in context)) and supply is None:
            supply = curve
        else:
            unbound.append(curve)
    for curve in unbound:
        if demand is None and curve.slope < 0:
            demand = curve
        elif supply is None and curve.slope > 0:
            supply = curve
    return demand, supply


def equilibrium(demand: Curve, supply: Curve) -> Optional[Tuple[float, float]]:
    """(P*, Q*) where the inverse curves cross."""
    denominator = supply.slope - demand.slope
    if abs(denominator) < DOMAIN_EPS:
        return None
    q = (demand.intercept - supply.intercept) / denominator
    return demand.price(q), q


def arc_elasticity(p1: float, q1: float, p2: float, q2: float) -> Optional[float]:
    """Midpoint elasticity."""
    q_mid, p_mid = (q1 + q2) / 2, (p1 + p2) / 2
    if q_mid == 0 or p_mid == 0 or p2 == p1:
        return None
    return ((q2 - q1) / q_mid) / ((p2 - p1) / p_mid)


def point_elasticity(demand: Curve, p: float, q: float) -> Optional[float]:
    if q == 0 or abs(demand.slope) < DOMAIN_EPS:
        return None
    return (1 / demand.slope) * p / q


def tax_outcome(demand: Curve, supply: Curve, tax: float) -> Optional[dict]:
    """Per-unit tax on sellers: supply shifts up by `tax`."""
    before = equilibrium(demand, supply)
    after = equilibrium(demand, Curve(supply.intercept + tax, supply.slope))
    if before is None or after is None:
        return None
    p0, q0 = before
    buyer_price, q1 = after
    return {
        "q0": q0,
        "p0": p0,
        "q1": q1,
        "buyer_price": buyer_price,
        "seller_price": buyer_price - tax,
        "revenue": tax * q1,
        "dwl": 0.5 * tax * (q0 - q1),
    }


def _rate(text: str, *labels) -> Optional[float]:
    value = find_percent(text, *labels)
    if value is not None and abs(value) > 1:
        return value / 100
    return value


_PAIR = re.compile(rf"\(\s*{NUM}\s*,\s*{NUM}\s*\)")

_TARGETS = (
    (r"consumer\s+surplus|\bcs\b", "cs"),
    (r"producer\s+surplus|\bps\b", "ps"),
    (r"deadweight|\bdwl\b", "dwl"),
    (r"tax\s+revenue|government\s+revenue", "revenue"),
    (r"elasticity", "e"),
    (r"shortage", "shortage"),
    (r"surplus", "surplus"),
    (r"deflator", "deflator"),
    (r"unemployment\s+rate", "u"),
    (r"participation", "lfpr"),
    (r"multiplier", "m"),
    (r"inflation", "π"),
    (r"\bgdp\b", "gdp"),
    (r"equilibrium\s+price|\bp\*", "p*"),
    (r"equilibrium\s+quantity|\bq\*", "q*"),
)


class EconomicsVerifier(Verifier):
    """
    Principles-level micro and macro.

    Demand and supply are linear; taxes are per unit and collected from
    sellers. Elasticities are compared in absolute value, and rates such as
    inflation or unemployment accept `4%`, `0.04` or a bare `4`.
    """

    name = "economics"
    subject = "economics"
    method = "economics-basic"
    trigger = re.compile(
        r"\b(demand|supply|equilibrium|elasticity|consumer\s*surplus|producer\s*surplus|deadweight|dwl|shortage|"
        r"ceiling|floor|gdp|deflator|cpi|inflation|unemploy\w*|labou?r\s*force|money\s*multiplier|reserve\s*ratio|"
        r"fisher|nominal|real)\b|(?<![\w.])Q_?[ds]\s*=",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(demand|supply|elasticity|surplus|deadweight|shortage|ceiling|floor|gdp|deflator|cpi|inflation)\b",
        r"\b(unemployment|labou?r\s*force|multiplier|reserve\s*ratio|fisher)\b",
        r"\bq[ds]\s*=",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        lower = text.lower()
        final = problem.final
        rep = reported_value(final)
        if rep is None:
            return
        rate_rep = reported_rate(final)
        collector.focus(asked_for(text, _TARGETS, fallback=False))

        self._check_markets(text, lower, rep, rate_rep, collector)
        self._check_macro(text, lower, rep, rate_rep, collector)

    # -------------------------
    # Micro
    # -------------------------
    def _check_markets(self, text, lower, rep, rate_rep, collector):
        demand, supply = parse_curves(text)
        eq = equilibrium(demand, supply) if demand and supply else None

        if eq is not None and re.search(r"equilibrium|p\*|q\*", lower) and "tax" not in lower:
            price, quantity = eq
            ask_price = collector.wants("P*", ("p", "pe", "p_eq"))
            ask_quantity = collector.wants("Q*", ("q", "qe", "q_eq"))
            if ask_price and ask_quantity:
                ask_price = abs(price - rep) <= abs(quantity - rep)
                ask_quantity = not ask_price
            if ask_price:
                collector.compare("P*", price, rep, TIGHT, "equilibrium price mismatch", aliases=("p", "pe", "p_eq"))
            if ask_quantity:
                collector.compare("Q*", quantity, rep, TIGHT, "equilibrium quantity mismatch", aliases=("q", "qe", "q_eq"))

        if eq is not None:
            price, quantity = eq
            if re.search(r"consumer\s*surplus", lower):
                collector.compare("CS", 0.5 * (demand.intercept - price) * quantity, rep, STANDARD,
                                  "consumer surplus mismatch", aliases=("consumer surplus",))
            if re.search(r"producer\s*surplus", lower):
                collector.compare("PS", 0.5 * (price - supply.intercept) * quantity, rep, STANDARD,
                                  "producer surplus mismatch", aliases=("producer surplus",))

        if "elasticity" in lower:
            pairs = [(float(a), float(b)) for a, b in _PAIR.findall(text)]
            p1 = find_number(text, labeled_cs("P1"))
            p2 = find_number(text, labeled_cs("P2"))
            q1 = find_number(text, labeled_cs("Q1"))
            q2 = find_number(text, labeled_cs("Q2"))
            e = None
            if None not in (p1, p2, q1, q2):
                e = arc_elasticity(p1, q1, p2, q2)
            elif len(pairs) >= 2:
                (x1, y1), (x2, y2) = pairs[:2]
                # Pairs are (Q, P) unless the board writes (P, Q)
                if re.search(r"\(\s*p\s*,\s*q\s*\)", lower):
                    e = arc_elasticity(x1, y1, x2, y2)
                else:
                    e = arc_elasticity(y1, x1, y2, x2)
            elif demand is not None:
                p_at = find_number(text, labeled(r"(?:p|price)"))
                if p_at is not None and demand.quantity(p_at) is not None:
                    e = point_elasticity(demand, p_at, demand.quantity(p_at))
                elif eq is not None:
                    e = point_elasticity(demand, *eq)
            if e is not None:
                collector.compare("|E|", abs(e), abs(rep), STANDARD, "elasticity mismatch",
                                  aliases=("e", "ed", "e_d", "elasticity", "pes", "ped"))

        tax = find_number(text, labeled(r"(?:tax|t)"), rf"(?:per[-\s]*unit\s+)?tax\s+of\s+{NUM}")
        if tax is not None and demand and supply and re.search(r"\btax\b", lower):
            outcome = tax_outcome(demand, supply, tax)
            if outcome is not None:
                if re.search(r"revenue", lower):
                    collector.compare("revenue", outcome["revenue"], rep, STANDARD, "tax revenue mismatch",
                                      aliases=("tax revenue", "r"))
                if re.search(r"deadweight|\bdwl\b", lower):
                    collector.compare("DWL", outcome["dwl"], rep, STANDARD, "DWL mismatch", aliases=("deadweight",))
                if re.search(r"new\s+equilibrium|after\s+(?:the\s+)?tax|post[-\s]*tax|buyers?\s+pay", lower):
                    target = "pb" if re.search(r"price|buyers?\s+pay", lower) and "quantity" not in lower else "q1"
                    if target == "pb":
                        collector.compare("Pb", outcome["buyer_price"], rep, TIGHT, "buyer price mismatch",
                                          aliases=("p1", "p_b", "price"))
                    else:
                        collector.compare("Q1", outcome["q1"], rep, TIGHT, "post-tax quantity mismatch",
                                          aliases=("q", "q_t", "quantity"))

        control = find_number(text, rf"(?:price\s*)?(?:ceiling|cap|floor)\s*(?:[:=]|of|at)\s*{NUM}")
        if control is not None and demand and supply:
            qd, qs = demand.quantity(control), supply.quantity(control)
            if qd is not None and qs is not None:
                if "surplus" in lower and "shortage" not in lower:
                    collector.compare("surplus", qs - qd, rep, TIGHT, "surplus mismatch", aliases=("excess supply",))
                else:
                    collector.compare("shortage", qd - qs, rep, TIGHT, "shortage mismatch",
                                      aliases=("excess demand", "gap"))

    # -------------------------
    # Macro
    # -------------------------
    def _check_macro(self, text, lower, rep, rate_rep, collector):
        if re.search(r"\bgdp\b|\by\s*=\s*c\s*\+", lower):
            C = find_number(text, labeled_cs("C"), labeled("consumption"))
            I = find_number(text, labeled_cs("I"), labeled("investment"))
            G = find_number(text, labeled_cs("G"), labeled(r"government(?:\s*spending)?"))
            NX = find_number(text, labeled_cs("NX"), labeled(r"net\s*exports"))
            X = find_number(text, labeled_cs("X"), labeled("exports"))
            M = find_number(text, labeled_cs("M"), labeled("imports"))
            if NX is None and X is not None and M is not None:
                NX = X - M
            if None not in (C, I, G, NX):
                collector.compare("GDP", C + I + G + NX, rep, TIGHT, "GDP mismatch", aliases=("y",))

        nominal = find_number(text, labeled(r"nominal\s*gdp"))
        real = find_number(text, labeled(r"real\s*gdp"))
        deflator = find_number(text, labeled(r"(?:gdp\s*)?deflator"))
        if "deflator" in lower and nominal is not None and real:
            collector.compare("deflator", nominal / real * 100, rep, STANDARD, "deflator mismatch")
        elif re.search(r"\breal\b", lower) and nominal is not None and deflator:
            collector.compare("real GDP", nominal / deflator * 100, rep, STANDARD, "real GDP mismatch",
                              aliases=("real", "real_gdp"))
        elif re.search(r"\bnominal\b", lower) and real is not None and deflator is not None:
            collector.compare("nominal GDP", real * deflator / 100, rep, STANDARD, "nominal GDP mismatch",
                              aliases=("nominal", "nominal_gdp"))

        if re.search(r"\bcpi\b|inflation", lower):
            cpi0 = find_number(text, labeled(r"cpi_?(?:0|t-1|old|base|previous)"))
            cpi1 = find_number(text, labeled(r"cpi_?(?:1|t|new|current)"))
            if cpi0 is None or cpi1 is None:
                values = [float(v) for v in re.findall(rf"\bcpi\w*\s*(?:[:=]|of|is|was)\s*{NUM}", text, re.IGNORECASE)]
                if len(values) >= 2:
                    cpi0, cpi1 = values[0], values[1]
            if cpi0 and cpi1 is not None and not re.search(r"fisher|real\s*(?:interest\s*)?rate", lower):
                collector.compare("π", (cpi1 - cpi0) / cpi0, rate_rep, RATE, "inflation mismatch",
                                  aliases=("inflation", "pi", "inflation rate"))

        if "growth" in lower:
            y0 = find_number(text, labeled(r"(?:y|gdp)_?(?:0|t-1|old|previous)"))
            y1 = find_number(text, labeled(r"(?:y|gdp)_?(?:1|t|new|current)"))
            if y0 and y1 is not None:
                collector.compare("g", (y1 - y0) / y0, rate_rep, RATE, "growth rate mismatch",
                                  aliases=("growth", "growth rate"))

        if re.search(r"fisher|real\s*(?:interest\s*)?rate|nominal\s*(?:interest\s*)?rate", lower):
            i = _rate(text, labeled("i"), labeled(r"nominal\s*(?:interest\s*)?rate"))
            r = _rate(text, labeled("r"), labeled(r"real\s*(?:interest\s*)?rate"))
            pi = _rate(text, labeled(r"(?:π|pi|inflation(?:\s*rate)?)"))
            exact = "exact" in lower
            if i is not None and pi is not None and r is None:
                value = (1 + i) / (1 + pi) - 1 if exact else i - pi
                collector.compare("r", value, rate_rep, RATE, "Fisher (r) mismatch", aliases=("real rate",))
            elif r is not None and pi is not None and i is None:
                value = (1 + r) * (1 + pi) - 1 if exact else r + pi
                collector.compare("i", value, rate_rep, RATE, "Fisher (i) mismatch", aliases=("nominal rate",))
            elif i is not None and r is not None and pi is None:
                value = (1 + i) / (1 + r) - 1 if exact else i - r
                collector.compare("π", value, rate_rep, RATE, "Fisher (π) mismatch", aliases=("pi", "inflation"))

        if re.search(r"money\s*multiplier|reserve\s*(?:ratio|requirement)", lower):
            rr = _rate(text, labeled(r"(?:rr|reserve\s*(?:ratio|requirement))"))
            if rr:
                multiplier = 1 / rr
                deposit = find_number(text, labeled(r"(?:initial|new|excess)\s*(?:deposits?|reserves)"),
                                      labeled(r"deposits?"))
                if deposit is not None and re.search(r"(?:total|change\s+in|maximum)\s+(?:deposits?|money)", lower):
                    collector.compare("ΔD", deposit * multiplier, rep, TIGHT, "deposit expansion mismatch",
                                      aliases=("deposits", "δd", "dd", "money supply"))
                else:
                    collector.compare("m", multiplier, rep, TIGHT, "money multiplier mismatch",
                                      aliases=("multiplier", "mm"))

        if re.search(r"unemploy|labou?r\s*force|lfpr|participation", lower):
            U = find_number(text, labeled("unemployed"), labeled_cs("U"))
            E = find_number(text, labeled("employed"), labeled_cs("E"))
            LF = find_number(text, labeled(r"labou?r\s*force"), labeled_cs("LF"))
            if LF is None and U is not None and E is not None:
                LF = U + E
            population = find_number(text, labeled(r"(?:adult\s*|working[-\s]*age\s*)?population"))
            if re.search(r"participation|lfpr", lower):
                if LF is not None and population:
                    collector.compare("LFPR", LF / population, rate_rep, RATE, "LFPR mismatch",
                                      aliases=("participation rate",))
            elif U is not None and LF:
                collector.compare("u", U / LF, rate_rep, RATE, "unemployment rate mismatch",
                                  aliases=("unemployment rate", "ur"))