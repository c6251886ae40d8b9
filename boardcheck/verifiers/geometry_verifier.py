"""
Geometry Verifier
Recomputes lengths, areas and volumes of plane figures, coordinates and solids
"""

import math
import re
from typing import List, Optional, Tuple

from boardcheck.config import STANDARD, TIGHT
from boardcheck.records import Problem
from boardcheck.utils.candidates import candidates_from_final
from boardcheck.utils.quantities import NUM, find_number, labeled
from boardcheck.utils.units import to_radians
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, reported_value


_POINT = re.compile(rf"\(\s*{NUM}\s*,\s*{NUM}\s*\)")
_ANGLE = re.compile(rf"(?:angle|theta|θ)\s*(?:of\s*)?[:=]?\s*{NUM}\s*(°|deg(?:rees?)?|rad(?:ians?)?)?", re.IGNORECASE)


def asked_measure(text: str, *measures: str) -> Optional[str]:
    return asked_for(text, [(re.escape(m), m) for m in measures])


def find_angle(text: str) -> Optional[float]:
    """Angle in radians; degrees unless `rad` is written."""
    m = _ANGLE.search(text)
    if not m:
        return None
    value = float(m.group(1))
    unit = m.group(2) or "deg"
    return to_radians(value, unit)


def find_points(text: str) -> List[Tuple[float, float]]:
    return [(float(x), float(y)) for x, y in _POINT.findall(text)]


def shoelace(points: List[Tuple[float, float]]) -> float:
    total = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1]):
        total += x1 * y2 - x2 * y1
    return abs(total) / 2


class GeometryVerifier(Verifier):
    """
    Plane and solid geometry.

    One figure is chosen per board (the most specific mention wins) and the
    measure it asks for is recomputed from the labeled dimensions.
    """

    name = "geometry"
    subject = "geometry"
    method = "geometry-identity"
    trigger = re.compile(
        r"\b(triangle|rectangle|square|circle|hypotenuse|pythagor\w*|perimeter|area|sector|arc|"
        r"polygon|vertices|distance|midpoint|slope|cube|cuboid|prism|cylinder|cone|sphere|volume)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(triangle|rectangle|square|circle|radius|diameter|hypotenuse|perimeter|area)\b",
        r"\b(sector|arc|polygon|midpoint|slope|cube|prism|cylinder|cone|sphere|volume|surface)\b",
        r"\bpi\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        reported = reported_value(problem.final)
        lower = text.lower()

        if re.search(r"\b(cube|cuboid|prism|box|cylinder|cone|sphere|hemisphere)\b", lower):
            self._solids(text, lower, reported, collector)
        elif re.search(r"\b(polygon|vertices|shoelace)\b", lower) and len(find_points(text)) >= 3:
            collector.compare("area", shoelace(find_points(text)), reported, TIGHT, "shoelace area mismatch")
        elif re.search(r"\b(distance|midpoint|slope)\b", lower) and len(find_points(text)) >= 2:
            self._coordinates(text, problem, reported, collector)
        elif re.search(r"\b(sector|arc)\b", lower):
            self._sector(text, reported, collector)
        elif re.search(r"\bright\b.*\btriangle\b|a\^?2\s*\+\s*b\^?2\s*=\s*c\^?2|hypotenuse|pythagor|opposite|adjacent", lower):
            self._right_triangle(text, lower, reported, collector)
        elif re.search(r"\b(rectangle|square)\b", lower):
            self._rectangle(text, lower, reported, collector)
        elif re.search(r"\btriangle\b", lower):
            self._triangle(text, reported, collector)
        elif re.search(r"\bcircle\b", lower):
            self._circle(text, lower, reported, collector)

    # -------------------------
    # Triangles
    # -------------------------
    def _right_triangle(self, text, lower, reported, collector):
        opposite = find_number(text, labeled("opp(?:osite)?"))
        adjacent = find_number(text, labeled("adj(?:acent)?"))
        hyp = find_number(text, labeled("hyp(?:otenuse)?"))
        angle = find_angle(text)

        if angle is not None:
            if opposite is not None and "adjacent" in lower and adjacent is None:
                collector.compare("adjacent", opposite / math.tan(angle), reported, STANDARD)
            elif opposite is not None:
                collector.compare("hypotenuse", opposite / math.sin(angle), reported, STANDARD,
                                  aliases=("hyp", "c", "h"))
            elif adjacent is not None and "opposite" in lower and opposite is None:
                collector.compare("opposite", adjacent * math.tan(angle), reported, STANDARD)
            elif adjacent is not None:
                collector.compare("hypotenuse", adjacent / math.cos(angle), reported, STANDARD,
                                  aliases=("hyp", "c", "h"))
            elif hyp is not None:
                side = asked_measure(text, "opposite", "adjacent")
                if side == "adjacent":
                    collector.compare("adjacent", hyp * math.cos(angle), reported, STANDARD)
                else:
                    collector.compare("opposite", hyp * math.sin(angle), reported, STANDARD)
            return

        if (opposite is not None or adjacent is not None) and hyp is not None:
            known = opposite if opposite is not None else adjacent
            leg = math.sqrt(max(hyp ** 2 - known ** 2, 0))
            collector.compare("side", leg, reported, STANDARD, "Pythagorean mismatch",
                              aliases=("opposite", "adjacent", "a", "b"))
            return
        if opposite is not None and adjacent is not None:
            if "angle" in lower or "θ" in text or "theta" in lower:
                collector.compare("angle", math.degrees(math.atan2(opposite, adjacent)), reported, STANDARD,
                                  aliases=("theta", "θ"))
            else:
                collector.compare("hypotenuse", math.hypot(opposite, adjacent), reported, STANDARD,
                                  "Pythagorean mismatch", aliases=("c", "hyp", "side"))
            return

        a = find_number(text, labeled("a"))
        b = find_number(text, labeled("b"))
        c = find_number(text, labeled("c"))
        if a is not None and b is not None:
            collector.compare("side", math.hypot(a, b), reported, STANDARD, "Pythagorean mismatch",
                              aliases=("c", "hypotenuse"))
        elif a is not None and c is not None:
            collector.compare("side", math.sqrt(max(c ** 2 - a ** 2, 0)), reported, STANDARD,
                              "Pythagorean mismatch", aliases=("b",))
        elif b is not None and c is not None:
            collector.compare("side", math.sqrt(max(c ** 2 - b ** 2, 0)), reported, STANDARD,
                              "Pythagorean mismatch", aliases=("a",))

    def _triangle(self, text, reported, collector):
        base = find_number(text, labeled("b(?:ase)?"))
        height = find_number(text, labeled("h(?:eight)?"))
        if base is not None and height is not None:
            collector.compare("area", 0.5 * base * height, reported, TIGHT, aliases=("a",))
            return

        a = find_number(text, labeled("a"))
        b = find_number(text, labeled("b"))
        c = find_number(text, labeled("c"))
        if None in (a, b, c):
            return
        s = (a + b + c) / 2
        product = s * (s - a) * (s - b) * (s - c)
        if product < 0:
            collector.fail("area", "sides violate the triangle inequality", reported)
            return
        if asked_measure(text, "area", "perimeter") == "perimeter":
            collector.compare("perimeter", a + b + c, reported, TIGHT, aliases=("p",))
        else:
            collector.compare("area", math.sqrt(product), reported, STANDARD, "Heron area mismatch")

    # -------------------------
    # Rectangles and circles
    # -------------------------
    def _rectangle(self, text, lower, reported, collector):
        length = find_number(text, labeled("l(?:ength)?"))
        width = find_number(text, labeled("w(?:idth)?"), labeled("b(?:readth)?"))
        if length is None and width is None and "square" in lower:
            length = width = find_number(text, labeled("s(?:ide)?"), labeled("a"))
        if length is None or width is None:
            return

        measure = asked_measure(text, "area", "perimeter", "diagonal") or "area"
        if measure == "perimeter":
            collector.compare("perimeter", 2 * (length + width), reported, TIGHT, aliases=("p",))
        elif measure == "diagonal":
            collector.compare("diagonal", math.hypot(length, width), reported, STANDARD, aliases=("d",))
        else:
            collector.compare("area", length * width, reported, TIGHT, aliases=("a",))

    def _circle(self, text, lower, reported, collector):
        r = find_number(text, labeled("r(?:adius)?"))
        if r is None:
            d = find_number(text, labeled("d(?:iameter)?"))
            r = d / 2 if d is not None else None
        if r is None:
            return
        measure = asked_measure(text, "area", "circumference", "perimeter") or "area"
        if measure == "area":
            collector.compare("area", math.pi * r * r, reported, STANDARD, aliases=("a",))
        else:
            collector.compare("circumference", 2 * math.pi * r, reported, STANDARD, aliases=("c", "perimeter", "p"))

    def _sector(self, text, reported, collector):
        r = find_number(text, labeled("r(?:adius)?"))
        angle = find_angle(text)
        if r is None or angle is None:
            return
        if asked_measure(text, "area", "arc", "length") == "area":
            collector.compare("area", 0.5 * r * r * angle, reported, STANDARD, aliases=("a",))
        else:
            collector.compare("arc length", r * angle, reported, STANDARD, aliases=("s", "l", "arc"))

    # -------------------------
    # Coordinates
    # -------------------------
    def _coordinates(self, text, problem: Problem, reported, collector):
        (x1, y1), (x2, y2) = find_points(text)[:2]
        measure = asked_measure(text, "distance", "midpoint", "slope")
        if measure == "slope":
            if x2 == x1:
                collector.fail("slope", "vertical line has undefined slope", reported)
                return
            collector.compare("slope", (y2 - y1) / (x2 - x1), reported, TIGHT, aliases=("m",))
        elif measure == "midpoint":
            mid = ((x1 + x2) / 2, (y1 + y2) / 2)
            for candidate in candidates_from_final(problem.final, ("x", "y")):
                values = candidate.vector or [candidate.assignment.get("x"), candidate.assignment.get("y")]
                if len(values) == 2:
                    collector.compare("midpoint x", mid[0], values[0], TIGHT, aliases=("m", "midpoint"))
                    collector.compare("midpoint y", mid[1], values[1], TIGHT, aliases=("m", "midpoint"))
                    break
        else:
            collector.compare("distance", math.hypot(x2 - x1, y2 - y1), reported, STANDARD, aliases=("d",))

    # -------------------------
    # Solids
    # -------------------------
    def _solids(self, text, lower, reported, collector):
        surface = bool(re.search(r"surface|\bsa\b|\btsa\b|\bcsa\b|lateral", lower))
        r = find_number(text, labeled("r(?:adius)?"))
        if r is None:
            d = find_number(text, labeled("d(?:iameter)?"))
            r = d / 2 if d is not None else None
        h = find_number(text, labeled("h(?:eight)?"))

        if "cube" in lower:
            s = find_number(text, labeled("s(?:ide)?"), labeled("a"), labeled("edge"), labeled("l(?:ength)?"))
            if s is None:
                return
            if surface:
                collector.compare("surface area", 6 * s * s, reported, TIGHT, aliases=("sa", "a"))
            else:
                collector.compare("volume", s ** 3, reported, TIGHT, aliases=("v",))
        elif "sphere" in lower:
            if r is None:
                return
            factor = 0.5 if "hemisphere" in lower else 1.0
            if surface:
                collector.compare("surface area", factor * 4 * math.pi * r * r, reported, STANDARD, aliases=("sa", "a"))
            else:
                collector.compare("volume", factor * 4 / 3 * math.pi * r ** 3, reported, STANDARD, aliases=("v",))
        elif "cone" in lower:
            if r is None or h is None:
                return
            slant = math.hypot(r, h)
            if surface:
                lateral = math.pi * r * slant
                value = lateral if "lateral" in lower or "curved" in lower else lateral + math.pi * r * r
                collector.compare("surface area", value, reported, STANDARD, aliases=("sa", "a"))
            elif "slant" in lower:
                collector.compare("slant height", slant, reported, STANDARD, aliases=("l", "s"))
            else:
                collector.compare("volume", math.pi * r * r * h / 3, reported, STANDARD, aliases=("v",))
        elif "cylinder" in lower:
            if r is None or h is None:
                return
            if surface:
                lateral = 2 * math.pi * r * h
                value = lateral if "lateral" in lower or "curved" in lower else lateral + 2 * math.pi * r * r
                collector.compare("surface area", value, reported, STANDARD, aliases=("sa", "a"))
            else:
                collector.compare("volume", math.pi * r * r * h, reported, STANDARD, aliases=("v",))
        else:
            length = find_number(text, labeled("l(?:ength)?"))
            width = find_number(text, labeled("w(?:idth)?"), labeled("b(?:readth)?"))
            if None in (length, width, h):
                return
            if surface:
                collector.compare("surface area", 2 * (length * width + length * h + width * h),
                                  reported, TIGHT, aliases=("sa", "a"))
            else:
                collector.compare("volume", length * width * h, reported, TIGHT, aliases=("v",))
