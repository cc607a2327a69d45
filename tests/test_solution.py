import logging

import numpy as np
import pandas as pd
import pytest

from mini_static.analysis import LinearStaticAnalysis, NonlinearStaticAnalysis, solve
from mini_static.boundary_conditions import FixedDofBoundaryCondition, GlobalLoadBoundaryCondition
from mini_static.logging_config import setup_logging
from mini_static.materials import SVK
from mini_static.model import Mesh, Node
from mini_static.structure import StructuralBoundaryConditions, StructuralMaterials, Structure
from mini_static.v3d.model import Tetrahedron


def make_single_tetrahedron_structure():
    nodes = [Node((0.0, 0.0, 0.0)), Node((1.0, 0.0, 0.0)), Node((0.0, 1.0, 0.0)), Node((0.0, 0.0, 1.0))]
    tet = Tetrahedron(nodes, label='tet')
    node_bcs = {
        FixedDofBoundaryCondition(['u'], None, 'pin'): [nodes[0]],
        FixedDofBoundaryCondition(['u'], [1, 2], 'roller_x'): [nodes[1]],
        FixedDofBoundaryCondition(['u'], [2], 'roller_xy'): [nodes[2]],
        GlobalLoadBoundaryCondition(['u'], [0.0, 0.0, -1000.0], 'top_load'): [nodes[3]],
    }
    structure = Structure(
        Mesh(nodes, [tet]),
        StructuralMaterials({SVK(E=210e9, nu=0.3, label='steel'): [tet]}),
        StructuralBoundaryConditions(node_bcs=node_bcs),
    )
    return structure, tet


@pytest.fixture
def solved():
    structure, tet = make_single_tetrahedron_structure()
    analysis = NonlinearStaticAnalysis.from_final_factor(structure, 1.0, nsteps=4)
    return structure, tet, solve(analysis)


class TestAccessors:

    def test_one_state_per_step(self, solved):
        structure, tet, solution = solved
        assert len(solution) == 4
        np.testing.assert_allclose(solution.load_factors(), [0.25, 0.5, 0.75, 1.0])

    def test_target_kinds(self, solved):
        structure, tet, solution = solved
        top = tet.nodes[3]
        uz = top.dofs['u'][2]

        node_values = solution.displacements(top)
        dof_values = solution.displacements(uz)
        list_values = solution.displacements(top.dofs['u'])
        element_values = solution.displacements(tet)

        assert node_values[-1].shape == (3,)
        assert isinstance(dof_values[-1], float)
        assert dof_values[-1] == node_values[-1][2]
        np.testing.assert_array_equal(list_values[-1], node_values[-1])
        assert element_values[-1].shape == (4, 3)
        np.testing.assert_array_equal(element_values[-1][3], node_values[-1])

    def test_states_are_independent_snapshots(self, solved):
        structure, tet, solution = solved
        uz = [u[2] for u in solution.displacements(tet.nodes[3])]
        assert all(np.diff(uz) < 0), "Each step must keep its own displacements"

    def test_forces(self, solved):
        structure, tet, solution = solved
        top = tet.nodes[3]
        np.testing.assert_allclose(solution.external_forces(top)[-1], [0.0, 0.0, -1000.0])
        np.testing.assert_allclose(solution.internal_forces(top)[-1], [0.0, 0.0, -1000.0],
                                   atol=1e-2)

    def test_stress_and_strain(self, solved):
        structure, tet, solution = solved
        stresses = solution.stress(tet)
        strains = solution.strain(tet)
        assert len(stresses) == 4
        assert stresses[-1].shape == (3, 3)
        # right Cauchy-Green tensor stays close to I under a small load
        np.testing.assert_allclose(strains[-1], np.eye(3), atol=1e-6)
        assert tet in solution.stress()[0]

    def test_displacements_at_point(self, solved):
        structure, tet, solution = solved
        at_top = solution.displacements_at(tet.nodes[3].coordinates)[-1]
        np.testing.assert_allclose(at_top, solution.displacements(tet.nodes[3])[-1], atol=1e-15)

        centroid = np.mean([n.coordinates for n in tet.nodes], axis=0)
        at_centroid = solution.displacements_at(centroid)[-1]
        np.testing.assert_allclose(at_centroid, solution.displacements(tet)[-1].mean(axis=0))

    def test_point_outside_mesh(self, solved):
        structure, tet, solution = solved
        with pytest.raises(ValueError):
            solution.displacements_at((5.0, 5.0, 5.0))


class TestDataFrame:

    def test_summary_columns(self, solved):
        structure, tet, solution = solved
        df = solution.to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 4
        for column in ['step', 'load_factor', 'iterations', 'criterion', 'converged',
                       'residual_force_rel', 'displacement_rel', 'max_abs_displacement']:
            assert column in df.columns
        assert df['converged'].all()
        assert (df['criterion'] == 'both').all()
        assert df['max_abs_displacement'].is_monotonic_increasing

    def test_linear_summary(self):
        structure, tet = make_single_tetrahedron_structure()
        df = solve(LinearStaticAnalysis(structure, [0.5, 1.0])).to_dataframe()
        assert list(df['iterations']) == [1, 1]
        assert (df['criterion'] == 'linear').all()
        assert df['converged'].all()
        assert np.isclose(df['max_abs_displacement'].iloc[1], 2 * df['max_abs_displacement'].iloc[0])


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_package_logger(self):
        logger = logging.getLogger('mini_static')
        level, handlers = logger.level, list(logger.handlers)
        yield
        logger.setLevel(level)
        logger.handlers[:] = handlers

    def test_repeated_setup_replaces_own_handlers(self):
        logger = setup_logging(logging.DEBUG)
        setup_logging(logging.DEBUG)
        streams = [h for h in logger.handlers if isinstance(h, logging.StreamHandler)]
        assert len(streams) == 1
        assert logger.name == 'mini_static'

    def test_caller_handlers_are_kept(self):
        logger = logging.getLogger('mini_static')
        own = logging.NullHandler()
        logger.addHandler(own)
        setup_logging(logging.INFO)
        assert own in logger.handlers

    def test_level_none_keeps_logger_level(self):
        logger = logging.getLogger('mini_static')
        logger.setLevel(logging.WARNING)
        setup_logging(None)
        assert logger.level == logging.WARNING

    def test_file_output(self, tmp_path):
        log_file = tmp_path / 'run.log'
        logger = setup_logging(logging.INFO, str(log_file))
        logger.info('hello')
        for handler in logger.handlers:
            handler.flush()
        assert 'hello' in log_file.read_text(encoding='utf-8')

    def test_steps_are_logged(self, caplog):
        structure, tet = make_single_tetrahedron_structure()
        with caplog.at_level(logging.INFO, logger='mini_static'):
            solve(NonlinearStaticAnalysis(structure, [1.0]))
        assert any('load factor' in record.getMessage() for record in caplog.records)
