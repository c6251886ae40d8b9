"""
Tests for steady heat-flow checks
"""

import math

import pytest

from boardcheck.verifiers.heat_verifier import HeatVerifier, fin_heat_rate


def test_long_fin_approaches_infinite_fin():
    h, perimeter, k, area, excess = 10.0, 0.1, 200.0, 1e-4, 80.0
    infinite = math.sqrt(h * perimeter * k * area) * excess
    assert fin_heat_rate(h, perimeter, k, area, excess, 10.0) == pytest.approx(infinite)


def test_plane_wall_conduction(board):
    question = ("Heat conduction through a wall: k = 0.8 W/m·K, A = 10 m^2, L = 0.2 m, "
                "T1 = 300 K and T2 = 280 K. Find the heat rate.")
    v = HeatVerifier().run(board(question, "q = 800 W"))
    assert v.subject == "heat"
    assert v.all_verified


def test_convection_in_kilowatts(board):
    question = "Convection from a plate: h = 25 W/m^2·K, A = 2 m^2, Ts = 350 K, T_inf = 300 K. Find q."
    assert HeatVerifier().run(board(question, "q = 2.5 kW")).all_verified
    assert not HeatVerifier().run(board(question, "q = 2.5 W")).all_verified
