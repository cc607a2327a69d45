"""
MATERIALS: Isotropic Constitutive Models
========================================

PURPOSE:
--------
A material maps a strain measure to a stress measure and its tangent:

    (strain 3×3) → (stress 3×3, ∂stress/∂strain 6×6)

Two interchangeable models share that capability:

    IsotropicLinearElastic   small strain ε   → Cauchy stress σ
    SVK (Saint-Venant-Kirchhoff)  Green-Lagrange E → second Piola-Kirchhoff S

Both use the same isotropic elasticity tensor; the SVK model is materially
linear but is meant to be fed the nonlinear Green-Lagrange strain, which is
where the geometric nonlinearity comes from.

VOIGT CONVENTION:
-----------------
Symmetric tensors are stored as 6-vectors in the order

    [11, 22, 33, 23, 13, 12]

with ENGINEERING shear strains (γ_23 = 2 ε_23). Stresses carry the plain
shear components. With this convention the elasticity matrix has G (not 2G)
on the shear diagonal and  stress_voigt = C @ strain_voigt.

Both models are stateless: no history variables, no internal iteration.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

# (row, col) of each Voigt component
VOIGT_PAIRS = ((0, 0), (1, 1), (2, 2), (1, 2), (0, 2), (0, 1))


def voigt(tensor: np.ndarray, engineering_shear: bool = False) -> np.ndarray:
    """
    Convert a symmetric 3×3 tensor to a Voigt 6-vector.

    Use engineering_shear=True for strains (shear terms doubled).
    """
    factor = 2.0 if engineering_shear else 1.0
    v = np.array([tensor[i, j] for i, j in VOIGT_PAIRS], dtype=float)
    v[3:] *= factor
    return v


def tensor_from_voigt(v: np.ndarray, engineering_shear: bool = False) -> np.ndarray:
    """Inverse of `voigt`."""
    factor = 0.5 if engineering_shear else 1.0
    t = np.zeros((3, 3), dtype=float)
    for k, (i, j) in enumerate(VOIGT_PAIRS):
        value = v[k] * (factor if k >= 3 else 1.0)
        t[i, j] = value
        t[j, i] = value
    return t


def lame_from_young(E: float, nu: float) -> Tuple[float, float]:
    """Lamé parameters (λ, G) from Young's modulus and Poisson's ratio."""
    G = E / (2 * (1 + nu))
    lam = E * nu / ((1 + nu) * (1 - 2 * nu))
    return lam, G


def young_from_lame(lam: float, G: float) -> Tuple[float, float]:
    """Young's modulus and Poisson's ratio (E, ν) from Lamé parameters."""
    E = G * (3 * lam + 2 * G) / (lam + G)
    nu = lam / (2 * (lam + G))
    return E, nu


@dataclass(frozen=True)
class _IsotropicElastic:
    """
    Shared parameters of the isotropic models.

    Parameters:
    -----------
    E : float
        Young's modulus (Pa). Steel ~2e11, aluminium ~7e10.
    nu : float
        Poisson's ratio, -1 < ν < 0.5.
    density : float, optional
        Mass density (kg/m³). None for static analyses.
    label : str
        Name used to look the material up in a structure.
    """
    E: float
    nu: float
    density: Optional[float] = None
    label: str = ""

    def __post_init__(self):
        if self.E <= 0:
            raise ValueError(f"Young's modulus must be positive, got {self.E}")
        if not -1.0 < self.nu < 0.5:
            raise ValueError(f"Poisson's ratio must be in (-1, 0.5), got {self.nu}")

    @classmethod
    def from_lame(cls, lam: float, G: float, density: Optional[float] = None, label: str = ""):
        E, nu = young_from_lame(lam, G)
        return cls(E, nu, density, label)

    def parameters(self) -> Tuple[float, float]:
        return self.E, self.nu

    def lame_parameters(self) -> Tuple[float, float]:
        return lame_from_young(self.E, self.nu)

    def elasticity_tensor(self) -> np.ndarray:
        """6×6 isotropic elasticity matrix in Voigt notation (engineering shear)."""
        lam, G = self.lame_parameters()
        C = np.zeros((6, 6), dtype=float)
        C[:3, :3] = lam
        C[[0, 1, 2], [0, 1, 2]] = lam + 2 * G
        C[[3, 4, 5], [3, 4, 5]] = G
        return C

    def _linear_stress(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        lam, G = self.lame_parameters()
        strain = np.asarray(strain, dtype=float)
        stress = lam * np.trace(strain) * np.eye(3) + 2 * G * strain
        return stress, self.elasticity_tensor()

    def uniaxial_stress(self, strain: float) -> Tuple[float, float]:
        """Axial stress and tangent modulus for 1-D (bar) kinematics."""
        return self.E * strain, self.E


@dataclass(frozen=True)
class IsotropicLinearElastic(_IsotropicElastic):
    """
    Small-strain isotropic linear elastic material.

    σ = λ tr(ε) I + 2G ε,   ∂σ/∂ε = C (constant)
    """

    def cauchy_stress(self, eps: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self._linear_stress(eps)

    def stress(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self.cauchy_stress(strain)


@dataclass(frozen=True)
class SVK(_IsotropicElastic):
    """
    Saint-Venant-Kirchhoff hyperelastic material.

    Same functional form as the linear model, applied to the Green-Lagrange
    strain E, giving the second Piola-Kirchhoff stress:

        S = λ tr(E) I + 2G E,   ∂S/∂E = C (constant)

    Example:
    --------
    >>> steel = SVK(E=210e9, nu=0.3, label="steel")
    >>> lam, G = steel.lame_parameters()
    >>> round(SVK.from_lame(lam, G).E)
    210000000000
    """

    def cosserat_stress(self, green_strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self._linear_stress(green_strain)

    def stress(self, strain: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return self.cosserat_stress(strain)


def is_hyperelastic(material) -> bool:
    return isinstance(material, SVK)
