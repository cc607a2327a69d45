import numpy as np
import pytest

from mini_static.materials import (
    SVK,
    IsotropicLinearElastic,
    lame_from_young,
    tensor_from_voigt,
    voigt,
)


def test_lame_round_trip():
    """E, ν → λ, G → E, ν gives back the same material."""
    steel = SVK(E=210e9, nu=0.3, label='steel')
    lam, G = steel.lame_parameters()
    again = SVK.from_lame(lam, G, label='steel')

    assert np.isclose(again.E, steel.E, rtol=1e-12)
    assert np.isclose(again.nu, steel.nu, rtol=1e-12)


def test_shear_modulus():
    lam, G = lame_from_young(200.0, 0.25)
    assert np.isclose(G, 80.0)
    assert np.isclose(lam, 80.0)


def test_elasticity_tensor_matches_stress():
    """C @ voigt(ε) (engineering shear) equals voigt(σ)."""
    material = IsotropicLinearElastic(E=70e9, nu=0.33)
    eps = np.array([
        [1.0e-4, 2.0e-5, -1.0e-5],
        [2.0e-5, -3.0e-5, 4.0e-5],
        [-1.0e-5, 4.0e-5, 5.0e-5],
    ])
    sigma, C = material.cauchy_stress(eps)

    np.testing.assert_allclose(C @ voigt(eps, engineering_shear=True), voigt(sigma), rtol=1e-12)
    np.testing.assert_allclose(C, C.T)


def test_svk_and_linear_share_functional_form():
    E = np.diag([1e-3, 0.0, 0.0])
    S, _ = SVK(E=1.0, nu=0.0).cosserat_stress(E)
    sigma, _ = IsotropicLinearElastic(E=1.0, nu=0.0).cauchy_stress(E)
    np.testing.assert_allclose(S, sigma)
    assert np.isclose(S[0, 0], 1e-3)


def test_voigt_round_trip():
    t = np.array([[1.0, 6.0, 5.0], [6.0, 2.0, 4.0], [5.0, 4.0, 3.0]])
    np.testing.assert_array_equal(voigt(t), [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    np.testing.assert_array_equal(tensor_from_voigt(voigt(t, True), True), t)


def test_uniaxial_stress():
    stress, tangent = IsotropicLinearElastic(E=100.0, nu=0.3).uniaxial_stress(0.01)
    assert np.isclose(stress, 1.0)
    assert tangent == 100.0


@pytest.mark.parametrize("E, nu", [(-1.0, 0.3), (1.0, 0.5), (1.0, -1.0)])
def test_invalid_parameters(E, nu):
    with pytest.raises(ValueError):
        SVK(E=E, nu=nu)


def test_materials_are_immutable():
    material = SVK(E=1.0, nu=0.3)
    with pytest.raises(AttributeError):
        material.E = 2.0
