"""
Tests for hydrostatics and continuity checks
"""

from boardcheck.verifiers.fluids_verifier import FluidsVerifier


def test_hydrostatic_pressure(board):
    question = "Find the hydrostatic pressure at depth h = 10 m in water with rho = 1000 kg/m^3."
    v = FluidsVerifier().run(board(question, "P = 98.1 kPa"))
    assert v.subject == "fluids"
    assert v.all_verified


def test_continuity_outlet_speed(board):
    question = "Water flows in a pipe. A1 = 0.02 m^2, v1 = 3 m/s and A2 = 0.01 m^2. Find v2 by continuity."
    v = FluidsVerifier().run(board(question, "v2 = 6 m/s"))
    assert len(v.checks) == 1
    assert v.all_verified
    assert not FluidsVerifier().run(board(question, "v2 = 1.5 m/s")).all_verified
