"""
Engine Configuration
Immutable tolerances, physical constants and sampling grids shared by all verifiers
"""

from typing import NamedTuple


class Tolerance(NamedTuple):
    """Combined relative + absolute comparison window."""
    rtol: float
    atol: float
    abs_tol: float


# -------------------------
# Tolerance presets
# -------------------------
# Closed-form algebraic identities
TIGHT = Tolerance(rtol=1e-6, atol=1e-6, abs_tol=1e-6)
# Formulas whose inputs are usually rounded on the board
STANDARD = Tolerance(rtol=1e-5, atol=1e-6, abs_tol=1e-3)
# Radiation, fins, reported values with 3-4 significant digits
LOOSE = Tolerance(rtol=1e-4, atol=1e-6, abs_tol=1e-2)
# Simpson integration and sampled derivatives
NUMERIC = Tolerance(rtol=2e-3, atol=1e-4, abs_tol=1e-3)
# Answers usually written to cents / two decimals
MONEY = Tolerance(rtol=1e-3, atol=1e-6, abs_tol=0.01)
# Rates reported in percent with two decimals
RATE = Tolerance(rtol=1e-3, atol=1e-6, abs_tol=5e-4)
# Hand work from rounded factor tables (PV factors, z tables)
TABLE = Tolerance(rtol=5e-3, atol=1e-6, abs_tol=0.05)

RESIDUAL_TOL = 1e-6
DOMAIN_EPS = 1e-12

# -------------------------
# Physical constants
# -------------------------
G_PHYSICS = 9.8
G_ENGINEERING = 9.81
R_UNIVERSAL = 8.314462618      # J/(mol*K)
R_LATM = 0.082057              # L*atm/(mol*K)
STEFAN_BOLTZMANN = 5.670374419e-8  # W/(m^2*K^4)
ATM_PA = 101325.0

# -------------------------
# Numerical method limits
# -------------------------
SIMPSON_INTERVALS = 200
NEWTON_MAX_ITER = 30
BISECTION_STEPS = 300
IRR_BRACKET = (-0.999, 10.0)

# Sample points for comparing two functions of x
SAMPLE_POINTS = (-2.0, -1.0, -0.5, 0.5, 1.0, 2.0)
SAMPLE_AGREEMENT = 0.8
LIMIT_STEPS = (1e-2, 5e-3, 1e-3)

# Only boards classified as a problem are verified
PROBLEM_TYPE_PREFIX = "PROBLEM"
