"""
CROSS SECTIONS
==============

Geometric properties of bar cross sections. A truss only needs the area, but
every section exposes the full set so the same objects can describe frame
members:

    area        A
    Ixx         torsional constant (about the member axis)
    Iyy, Izz    second moments of area about the local y, z axes
    Ixy, Ixz, Iyz  products of area (zero for doubly symmetric shapes)

TORSION OF RECTANGLES:
----------------------
Roark's Formulas for Stress and Strain (7th ed.), table 10.1, with a and b
half the larger and smaller side:

    Ixx = a b³ (16/3 - 3.36 b/a (1 - b⁴ / (12 a⁴)))

A square is the a = b case of the same formula, so Square(w) and
Rectangle(w, w) agree.
"""

from dataclasses import dataclass

import numpy as np


def _rectangle_torsion(width_y: float, width_z: float) -> float:
    a = 0.5 * max(width_y, width_z)
    b = 0.5 * min(width_y, width_z)
    return a * b**3 * (16 / 3 - 3.36 * b / a * (1 - b**4 / (12 * a**4)))


class CrossSection:
    """Common interface; subclasses define the properties."""

    area: float
    Ixx: float
    Iyy: float
    Izz: float
    Ixy: float = 0.0
    Ixz: float = 0.0
    Iyz: float = 0.0

    def inertia_tensor(self) -> np.ndarray:
        """Inertia tensor in the local x-y-z system."""
        return np.array([
            [self.Ixx, -self.Ixy, -self.Ixz],
            [-self.Ixy, self.Iyy, -self.Iyz],
            [-self.Ixz, -self.Iyz, self.Izz],
        ], dtype=float)


@dataclass(frozen=True)
class Square(CrossSection):
    """Square section of side `width` (y and z)."""
    width: float

    @property
    def area(self) -> float:
        return self.width**2

    @property
    def Ixx(self) -> float:
        return _rectangle_torsion(self.width, self.width)

    @property
    def Iyy(self) -> float:
        return self.width**4 / 12

    @property
    def Izz(self) -> float:
        return self.width**4 / 12


@dataclass(frozen=True)
class Rectangle(CrossSection):
    """Rectangular section with widths along local y and z."""
    width_y: float
    width_z: float

    @property
    def area(self) -> float:
        return self.width_y * self.width_z

    @property
    def Ixx(self) -> float:
        return _rectangle_torsion(self.width_y, self.width_z)

    @property
    def Iyy(self) -> float:
        return self.width_z**3 * self.width_y / 12

    @property
    def Izz(self) -> float:
        return self.width_y**3 * self.width_z / 12


@dataclass(frozen=True)
class Circle(CrossSection):
    """Solid circular section of diameter `diameter`."""
    diameter: float

    @property
    def area(self) -> float:
        return np.pi * self.diameter**2 / 4

    @property
    def Ixx(self) -> float:
        return np.pi * self.diameter**4 / 32

    @property
    def Iyy(self) -> float:
        return np.pi * self.diameter**4 / 64

    @property
    def Izz(self) -> float:
        return np.pi * self.diameter**4 / 64


@dataclass(frozen=True)
class GenericCrossSection(CrossSection):
    """
    Section given directly by its properties, for shapes not covered above.

    Example:
    --------
    >>> GenericCrossSection(A=5e-3, Ixx=1e-6, Iyy=2e-6, Izz=2e-6).area
    0.005
    """
    A: float
    Ixx: float
    Iyy: float
    Izz: float
    Ixy: float = 0.0
    Ixz: float = 0.0
    Iyz: float = 0.0

    @property
    def area(self) -> float:
        return self.A
