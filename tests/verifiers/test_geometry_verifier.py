"""
Tests for plane figures, coordinates and solids
"""

import math

import pytest

from boardcheck.verifiers.geometry_verifier import GeometryVerifier, asked_measure, find_angle, shoelace


def test_shoelace_area():
    assert shoelace([(0, 0), (4, 0), (4, 3)]) == 6.0
    assert shoelace([(0, 0), (0, 3), (4, 3), (4, 0)]) == 12.0


def test_asked_measure_prefers_the_question():
    assert asked_measure("The area is 20. Find the perimeter.", "area", "perimeter") == "perimeter"
    assert asked_measure("area of a square", "area", "perimeter") == "area"


def test_angle_defaults_to_degrees():
    assert find_angle("angle = 90°") == pytest.approx(math.pi / 2)
    assert find_angle("theta = 1.5 rad") == pytest.approx(1.5)


# --- Verification ---

def test_rectangle_area(board):
    v = GeometryVerifier().run(board("A rectangle has length = 5 and width = 3. Find the area.", "A = 15"))
    assert v.subject == "geometry"
    assert v.all_verified


def test_right_triangle_hypotenuse(board):
    question = "A right triangle has legs a = 3 and b = 4. Find the hypotenuse."
    assert GeometryVerifier().run(board(question, "c = 5")).all_verified
    assert not GeometryVerifier().run(board(question, "c = 7")).all_verified


def test_circle_area(board):
    question = "A circle has radius = 2. Find the area."
    assert GeometryVerifier().run(board(question, "A = 12.566371")).all_verified
    assert not GeometryVerifier().run(board(question, "A = 12")).all_verified


def test_impossible_triangle(board):
    v = GeometryVerifier().run(board("A triangle has sides a = 1, b = 2 and c = 5. Find the area.", "1"))
    assert not v.all_verified
    assert v.checks[0].reason == "sides violate the triangle inequality"


def test_polygon_from_vertices(board):
    question = "Find the area of the polygon with vertices (0, 0), (4, 0), (4, 3), (0, 3)."
    assert GeometryVerifier().run(board(question, "12")).all_verified


def test_distance_between_points(board):
    v = GeometryVerifier().run(board("Find the distance between (0, 0) and (3, 4).", "d = 5"))
    assert v.all_verified


def test_sector_arc_length(board):
    v = GeometryVerifier().run(board("A sector has radius = 6 and angle = 60°. Find the arc length.", "s = 6.2832"))
    assert v.all_verified
