"""
Physics Verifier
Closed-form mechanics: kinematics, projectiles, forces, energy, momentum, circular motion and springs
"""

import math
import re
from typing import Dict

from boardcheck.config import G_PHYSICS, NUMERIC
from boardcheck.records import Problem
from boardcheck.utils.quantities import labeled, labeled_cs
from boardcheck.verifiers.base import CheckCollector, Verifier, asked_for, find_in_units, reported_value


# Phrases that name the unknown, most specific first
_TARGETS = (
    (r"time\s+of\s+flight", "T"),
    (r"\brange\b", "R"),
    (r"max(?:imum)?\s+height", "H"),
    (r"centripetal\s+acceleration", "a_c"),
    (r"centripetal\s+force", "F_c"),
    (r"kinetic\s+energy", "KE"),
    (r"potential\s+energy", "PE"),
    (r"(?:elastic|spring)\s+(?:potential\s+)?energy", "U"),
    (r"\bperiod\b", "T"),
    (r"angular\s+(?:velocity|speed)", "ω"),
    (r"\bmomentum\b", "p"),
    (r"\bfriction", "friction"),
    (r"\bweight\b", "weight"),
    (r"\bpower\b", "P"),
    (r"\bwork\b", "W"),
    (r"\bforce\b", "F"),
    (r"\bacceleration\b", "a"),
    (r"(?:final\s+)?(?:velocity|speed)", "v"),
    (r"\b(?:displacement|distance)\b", "s"),
)


def extract_knowns(text: str) -> Dict[str, float]:
    """Labeled mechanics quantities, converted to SI."""
    found = {
        "u": find_in_units(text, "velocity", labeled("u"), labeled("v0"), labeled("u0"), labeled(r"initial\s*velocity")),
        "v": find_in_units(text, "velocity", labeled("v"), labeled(r"final\s*velocity"), labeled("v1")),
        "a": find_in_units(text, None, labeled("a"), labeled("acceleration")),
        "t": find_in_units(text, "time", labeled("t"), labeled("time")),
        "s": find_in_units(text, "length", labeled("s"), labeled("displacement")),
        "m": find_in_units(text, "mass", labeled("m"), labeled("mass")),
        "F": find_in_units(text, None, labeled_cs("F"), labeled("force")),
        "d": find_in_units(text, "length", labeled("d"), labeled("distance")),
        "h": find_in_units(text, "length", labeled("h"), labeled("height")),
        "r": find_in_units(text, "length", labeled("r"), labeled("radius")),
        "T": find_in_units(text, "time", labeled_cs("T"), labeled("period")),
        "omega": find_in_units(text, None, labeled("omega"), labeled("ω"), labeled(r"angular\s*velocity")),
        "g": find_in_units(text, None, labeled("g"), labeled("gravity")),
        "mu": find_in_units(text, None, labeled("μ"), labeled("mu"), labeled(r"coefficient\s*of\s*friction")),
        "theta": find_in_units(text, "angle", labeled("θ"), labeled("theta"), labeled("angle")),
        "k": find_in_units(text, None, labeled("k"), labeled(r"spring\s*constant")),
        "x": find_in_units(text, "length", labeled("x"), labeled("extension"), labeled("compression")),
        "N": find_in_units(text, None, labeled_cs("N"), labeled(r"normal\s*force")),
        "m1": find_in_units(text, "mass", labeled("m1")),
        "m2": find_in_units(text, "mass", labeled("m2")),
        "v1i": find_in_units(text, "velocity", labeled("v1i?"), labeled("u1")),
        "v2i": find_in_units(text, "velocity", labeled("v2i?"), labeled("u2")),
    }
    return {k: v for k, v in found.items() if v is not None}


class PhysicsVerifier(Verifier):
    """
    Classical mechanics with constant acceleration and level-ground projectiles.

    The answer is compared against every formula the labeled knowns allow;
    the final's label (or the quantity the question asks for) selects which
    of those checks count. Negative mass, time or μ fail outright.
    """

    name = "physics"
    subject = "physics"
    method = "physics-mechanics"
    trigger = re.compile(
        r"\b(kinematics|acceleration|displacement|velocity|projectile|range|height|force|mass|energy|work|"
        r"power|momentum|collision|elastic|centripetal|period|omega|spring|hooke|friction)\b",
        re.IGNORECASE,
    )
    keywords = (
        r"\b(kinematics|acceleration|displacement|force|mass|energy|momentum|projectile|velocity)\b",
        r"\b(m/s|kg|n|j)\b",
    )

    def check(self, problem: Problem, text: str, collector: CheckCollector) -> None:
        k = extract_knowns(text)
        rep = reported_value(problem.final)
        collector.focus(asked_for(text, _TARGETS, fallback=False))

        invalid = False
        for name, label, reason in (("m", "m>=0", "negative mass"),
                                    ("t", "t>=0", "negative time"),
                                    ("mu", "μ>=0", "negative μ")):
            if k.get(name) is not None and k[name] < 0:
                collector.fail(label, reason, k[name])
                invalid = True
        if invalid or rep is None:
            return

        g = k.get("g", G_PHYSICS)
        u, v, a, t, s = (k.get(n) for n in ("u", "v", "a", "t", "s"))
        m = k.get("m")
        theta = k.get("theta")

        # Kinematics
        if None not in (u, a, t):
            collector.compare("v", u + a * t, rep, NUMERIC, "v=u+at mismatch", aliases=("final velocity",))
            collector.compare("s", u * t + 0.5 * a * t * t, rep, NUMERIC, "s=ut+1/2at^2 mismatch",
                              aliases=("d", "displacement"))
        if None not in (u, a, s) and u * u + 2 * a * s >= 0:
            collector.compare("v", math.sqrt(u * u + 2 * a * s), rep, NUMERIC, "v^2=u^2+2as mismatch")
        if None not in (u, v, t) and a is None:
            collector.compare("a", (v - u) / t if t else None, rep, NUMERIC, "a=(v-u)/t mismatch")

        # Projectile on level ground
        v0 = u if u is not None else v
        if v0 is not None and theta is not None:
            collector.compare("T", 2 * v0 * math.sin(theta) / g, rep, NUMERIC, "projectile T mismatch",
                              aliases=("time of flight", "t"))
            collector.compare("R", v0 * v0 * math.sin(2 * theta) / g, rep, NUMERIC, "projectile R mismatch",
                              aliases=("range",))
            collector.compare("H", (v0 * math.sin(theta)) ** 2 / (2 * g), rep, NUMERIC, "projectile H mismatch",
                              aliases=("h", "hmax", "max height"))

        # Forces
        if m is not None and a is not None:
            collector.compare("F", m * a, rep, NUMERIC, "F=ma mismatch", aliases=("f", "net force"))
        if m is not None:
            collector.compare("weight", m * g, rep, NUMERIC, "W=mg mismatch", aliases=("w", "fg"))
        if k.get("mu") is not None:
            normal = k.get("N", m * g if m is not None else None)
            if normal is not None:
                collector.compare("friction", k["mu"] * normal, rep, NUMERIC, "F_f=μN mismatch",
                                  aliases=("f_f", "ff", "f"))

        # Work, energy, power
        F, d = k.get("F"), k.get("d", s)
        speed = v if v is not None else u
        if F is not None and d is not None:
            work = F * d * (math.cos(theta) if theta is not None else 1.0)
            collector.compare("W", work, rep, NUMERIC, "W=F d cosθ mismatch", aliases=("work",))
            if t is not None and t != 0:
                collector.compare("P", work / t, rep, NUMERIC, "P=W/t mismatch", aliases=("power",))
            if None not in (m, u, v):
                delta_k = 0.5 * m * (v * v - u * u)
                collector.compare("ΔK", delta_k, work, NUMERIC._replace(rtol=3e-2, abs_tol=1e-2),
                                  "ΔK != W_net", aliases=("w", "work", "ΔK", "dk"))
        if m is not None and speed is not None:
            collector.compare("KE", 0.5 * m * speed * speed, rep, NUMERIC, "KE=1/2 m v^2 mismatch",
                              aliases=("k", "ke", "kinetic energy"))
            collector.compare("p", m * speed, rep, NUMERIC, "p=mv mismatch", aliases=("momentum",))
        if m is not None and k.get("h") is not None:
            collector.compare("PE", m * g * k["h"], rep, NUMERIC, "PE=mgh mismatch", aliases=("u", "potential energy"))
        if F is not None and speed is not None:
            collector.compare("P", F * speed, rep, NUMERIC, "P=Fv mismatch", aliases=("power",))

        # 1-D elastic collision
        m1, m2, v1i, v2i = (k.get(n) for n in ("m1", "m2", "v1i", "v2i"))
        if None not in (m1, m2, v1i, v2i) and m1 + m2 != 0:
            v1f = (m1 - m2) / (m1 + m2) * v1i + 2 * m2 / (m1 + m2) * v2i
            v2f = 2 * m1 / (m1 + m2) * v1i + (m2 - m1) / (m1 + m2) * v2i
            collector.compare("v1'", v1f, rep, NUMERIC, "elastic v1' mismatch", aliases=("v1f", "v1"))
            collector.compare("v2'", v2f, rep, NUMERIC, "elastic v2' mismatch", aliases=("v2f", "v2"))

        # Circular motion
        r, omega, period = k.get("r"), k.get("omega"), k.get("T")
        if r:
            if speed is not None:
                ac = speed * speed / r
            elif omega is not None:
                ac = omega * omega * r
            else:
                ac = None
            if ac is not None:
                collector.compare("a_c", ac, rep, NUMERIC, "a_c mismatch", aliases=("ac", "a"))
                if m is not None:
                    collector.compare("F_c", m * ac, rep, NUMERIC, "F_c=ma_c mismatch", aliases=("fc", "f"))
            if period:
                collector.compare("v", 2 * math.pi * r / period, rep, NUMERIC, "v=2πr/T mismatch")
                collector.compare("ω", 2 * math.pi / period, rep, NUMERIC, "ω=2π/T mismatch", aliases=("omega", "w"))
            if speed:
                collector.compare("T", 2 * math.pi * r / speed, rep, NUMERIC, "T=2πr/v mismatch", aliases=("period",))
            if omega:
                collector.compare("T", 2 * math.pi / omega, rep, NUMERIC, "T=2π/ω mismatch", aliases=("period",))

        # Springs
        if k.get("k") is not None and k.get("x") is not None:
            collector.compare("F", k["k"] * k["x"], rep, NUMERIC, "F=kx mismatch", aliases=("fs", "spring force"))
            collector.compare("U", 0.5 * k["k"] * k["x"] ** 2, rep, NUMERIC, "U=1/2 k x^2 mismatch",
                              aliases=("pe", "energy"))
