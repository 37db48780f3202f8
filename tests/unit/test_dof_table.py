"""Unit tests for the DOF table and sparsity pattern."""

from __future__ import annotations

import numpy as np
import pytest

from pythm.core.cell_types import CellType
from pythm.core.elements import Node
from pythm.core.exceptions import ConfigurationError
from pythm.core.mesh import Mesh, MeshIdGenerator
from pythm.numerics.dof_table import (
    FieldComponent,
    LocalToGlobalIndexMap,
    compute_sparsity_pattern,
)
from pythm.sample_meshes import create_line_mesh


class TestFieldComponent:
    """Tests for FieldComponent."""

    def test_default_order(self) -> None:
        """Test that components are linear by default."""
        assert FieldComponent("p").order == 1

    def test_unsupported_order(self) -> None:
        """Test that only orders 1 and 2 are allowed."""
        with pytest.raises(ConfigurationError, match="unsupported order 3"):
            FieldComponent("p", order=3)


class TestLocalToGlobalIndexMap:
    """Tests for LocalToGlobalIndexMap."""

    def test_linear_components(self) -> None:
        """Test component-major numbering on a line mesh."""
        mesh = create_line_mesh(n_elements=2)
        dofs = LocalToGlobalIndexMap(mesh, [FieldComponent("p"), FieldComponent("T")])

        assert dofs.n_dofs == 6
        assert dofs.n_components == 2
        assert dofs.n_elements == 2
        assert dofs.element_dofs(0).tolist() == [0, 1, 3, 4]
        assert dofs.element_dofs(1).tolist() == [1, 2, 4, 5]
        assert dofs.get_number_of_element_dof(1) == 4
        assert dofs.node_dof(2, 1) == 5

    def test_mixed_orders(self) -> None:
        """Test a linear and a quadratic component on a quadratic mesh."""
        mesh = create_line_mesh(n_elements=2, cell_type=CellType.LINE3)
        dofs = LocalToGlobalIndexMap(
            mesh, [FieldComponent("p", order=1), FieldComponent("u", order=2)]
        )

        assert dofs.n_dofs == 3 + 5
        assert dofs.element_dofs(0).tolist() == [0, 1, 3, 4, 6]
        assert dofs.element_dofs(1).tolist() == [1, 2, 4, 5, 7]
        assert dofs.node_dof(3, 0) == -1
        assert dofs.node_dof(3, 1) == 6

    def test_no_components(self, two_triangle_mesh: Mesh) -> None:
        """Test that a table without unknowns is rejected."""
        with pytest.raises(ConfigurationError, match="at least one field component"):
            LocalToGlobalIndexMap(two_triangle_mesh, [])

    def test_properties(self, two_triangle_mesh: Mesh) -> None:
        """Test accessors and representation."""
        components = [FieldComponent("p")]
        dofs = LocalToGlobalIndexMap(two_triangle_mesh, components)

        assert dofs.mesh is two_triangle_mesh
        assert dofs.components == tuple(components)
        assert repr(dofs) == "LocalToGlobalIndexMap(components=['p'], n_dofs=4)"


class TestSparsityPattern:
    """Tests for compute_sparsity_pattern."""

    def test_line_mesh(self) -> None:
        """Test row counts of a chain of line elements."""
        dofs = LocalToGlobalIndexMap(create_line_mesh(n_elements=3), [FieldComponent("p")])
        assert compute_sparsity_pattern(dofs).tolist() == [2, 3, 3, 2]

    def test_matches_dense_coupling(self, two_triangle_mesh: Mesh) -> None:
        """Test against a dense coupling matrix."""
        dofs = LocalToGlobalIndexMap(
            two_triangle_mesh, [FieldComponent("p"), FieldComponent("T")]
        )
        dense = np.zeros((dofs.n_dofs, dofs.n_dofs), dtype=bool)
        for i in range(dofs.n_elements):
            element_dofs = dofs.element_dofs(i)
            dense[np.ix_(element_dofs, element_dofs)] = True

        pattern = compute_sparsity_pattern(dofs)

        assert pattern.dtype == np.int64
        assert pattern.tolist() == dense.sum(axis=1).tolist()
        assert pattern.tolist() == [6, 8, 8, 6, 6, 8, 8, 6]

    def test_mesh_without_elements(self, id_generator: MeshIdGenerator) -> None:
        """Test that a mesh without elements has empty rows."""
        mesh = Mesh("empty", [Node(id=0, x=0.0, y=0.0)], [], id_generator=id_generator)
        dofs = LocalToGlobalIndexMap(mesh, [FieldComponent("u", order=2)])

        assert dofs.n_dofs == 1
        assert compute_sparsity_pattern(dofs).tolist() == [0]
