# mini_static - Static finite element analysis of solids and trusses
"""
MINI-STATIC: Linear and Geometrically Nonlinear Static FEM
==========================================================

This package provides:
- 4-node tetrahedra and 2-node truss bars
- Linear elastic and Saint-Venant-Kirchhoff hyperelastic materials
- Load-stepped linear and Newton-Raphson static analyses

ARCHITECTURE:
-------------
    kernel/                 Dimension-agnostic core (Dof numbering, assembly, reduced solve)
    v3d/                    Element kinds (Tetrahedron, Truss) and their kinematics
    model.py                Node, TriangularFace, Mesh
    materials.py            Isotropic constitutive models
    sections.py             Cross sections for bars
    boundary_conditions.py  Fixed Dofs and load-factor dependent loads
    structure.py            Mesh + materials + boundary conditions
    state.py                Displacements, forces, tangent of a running analysis
    assembler.py            Global Fint / K / Fext from the structure and state
    analysis.py             Load stepping, Newton-Raphson, solve()
    solution.py             Recorded states and accessors
    config.py               Analysis settings (dataclasses)
    logging_config.py       setup_logging()
"""

import logging

from .kernel import DOFManager, Dof, DofSymbolError, MechanismError, LinearSolverError, ConvergenceError
from .model import Node, TriangularFace, Mesh
from .materials import IsotropicLinearElastic, SVK
from .sections import Square, Rectangle, Circle, GenericCrossSection
from .v3d import Tetrahedron, Truss, NegativeVolumeError, internal_forces
from .boundary_conditions import (
    BoundaryConditionError,
    FixedDofBoundaryCondition,
    GlobalLoadBoundaryCondition,
)
from .structure import Structure, StructuralMaterials, StructuralBoundaryConditions
from .state import StaticState, ConvergenceCriterion
from .analysis import (
    AnalysisStage,
    LinearStaticAnalysis,
    NonlinearStaticAnalysis,
    NewtonRaphson,
    solve,
    run,
)
from .solution import StatesSolution
from .config import AnalysisConfig, ConvergenceSettings, LinearSolverSettings, DEFAULT_CONFIG
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'Dof', 'DOFManager', 'DofSymbolError',
    'MechanismError', 'LinearSolverError', 'ConvergenceError',
    'Node', 'TriangularFace', 'Mesh',
    'IsotropicLinearElastic', 'SVK',
    'Square', 'Rectangle', 'Circle', 'GenericCrossSection',
    'Tetrahedron', 'Truss', 'NegativeVolumeError', 'internal_forces',
    'BoundaryConditionError', 'FixedDofBoundaryCondition', 'GlobalLoadBoundaryCondition',
    'Structure', 'StructuralMaterials', 'StructuralBoundaryConditions',
    'StaticState', 'ConvergenceCriterion',
    'AnalysisStage', 'LinearStaticAnalysis', 'NonlinearStaticAnalysis', 'NewtonRaphson',
    'solve', 'run',
    'StatesSolution',
    'AnalysisConfig', 'ConvergenceSettings', 'LinearSolverSettings', 'DEFAULT_CONFIG',
    'setup_logging',
]
