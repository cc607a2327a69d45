# mini_static/v3d/elements.py
"""
ELEMENT DISPATCH
================

The assembler does not know about element kinds. It calls

    internal_forces(material, element, u_e) -> ElementResponse

and this module routes the call to the kind-specific routine. The set of
kinds and of materials is closed; anything else is a TypeError.
"""

from typing import Callable, Dict

import numpy as np

from ..materials import SVK, IsotropicLinearElastic
from .model import ElementResponse, Tetrahedron, Truss
from .tetrahedron import tetrahedron_internal_forces
from .truss import truss_internal_forces

_INTERNAL_FORCES: Dict[type, Callable] = {
    Tetrahedron: tetrahedron_internal_forces,
    Truss: truss_internal_forces,
}


def internal_forces(material, element, u_e: np.ndarray) -> ElementResponse:
    try:
        routine = _INTERNAL_FORCES[type(element)]
    except KeyError:
        raise TypeError(f"Unsupported element kind: {type(element).__name__}") from None
    if not isinstance(material, (IsotropicLinearElastic, SVK)):
        raise TypeError(
            f"Unsupported material {type(material).__name__} for {type(element).__name__}"
        )
    return routine(material, element, u_e)
