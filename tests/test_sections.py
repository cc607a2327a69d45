import numpy as np

from mini_static.sections import Circle, GenericCrossSection, Rectangle, Square


def test_square_matches_rectangle():
    """A square is a rectangle with equal sides, torsion included."""
    square = Square(0.2)
    rect = Rectangle(0.2, 0.2)

    assert np.isclose(square.area, rect.area)
    assert np.isclose(square.Ixx, rect.Ixx)
    assert np.isclose(square.Iyy, rect.Iyy)
    assert np.isclose(square.Izz, rect.Izz)


def test_square_torsion_constant():
    # Roark: a = b = w/2 → Ixx = (w/2)^4 (16/3 - 3.36 (1 - 1/12)) ≈ 0.1408 w^4
    w = 0.3
    expected = (w / 2)**4 * (16 / 3 - 3.36 * (1 - 1 / 12))
    assert np.isclose(Square(w).Ixx, expected)
    assert np.isclose(Square(w).Ixx / w**4, 0.1408, rtol=1e-3)


def test_rectangle_orientation():
    rect = Rectangle(width_y=0.1, width_z=0.3)
    assert np.isclose(rect.area, 0.03)
    assert np.isclose(rect.Iyy, 0.3**3 * 0.1 / 12)
    assert np.isclose(rect.Izz, 0.1**3 * 0.3 / 12)
    assert np.isclose(rect.Ixx, Rectangle(0.3, 0.1).Ixx)


def test_circle():
    d = 0.05
    circle = Circle(d)
    assert np.isclose(circle.area, np.pi * d**2 / 4)
    assert np.isclose(circle.Ixx, circle.Iyy + circle.Izz)


def test_inertia_tensor():
    section = GenericCrossSection(A=1.0, Ixx=3.0, Iyy=2.0, Izz=1.0, Iyz=0.5)
    np.testing.assert_array_equal(
        section.inertia_tensor(),
        [[3.0, 0.0, 0.0], [0.0, 2.0, -0.5], [0.0, -0.5, 1.0]],
    )
    assert section.area == 1.0
