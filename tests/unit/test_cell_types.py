"""Unit tests for cell types and reference topology."""

from __future__ import annotations

import pytest

from pythm.core.cell_types import (
    CELL_TYPE_SPECS,
    FAMILY_TOPOLOGY,
    CellType,
    ElementFamily,
    cell_type_from_string,
    linear_cell_type,
    topology,
)
from pythm.core.exceptions import ConfigurationError


class TestCellTypeSpecs:
    """Tests for the cell type tables."""

    def test_every_cell_type_has_spec(self) -> None:
        """Test that the cell type table covers every cell type."""
        assert set(CELL_TYPE_SPECS) == set(CellType)

    def test_every_family_has_topology(self) -> None:
        """Test that every family has a reference topology."""
        assert set(FAMILY_TOPOLOGY) == set(ElementFamily)

    @pytest.mark.parametrize(
        "cell_type,n_nodes",
        [
            (CellType.LINE3, 3),
            (CellType.TRI6, 6),
            (CellType.QUAD8, 8),
            (CellType.QUAD9, 9),
            (CellType.TET10, 10),
            (CellType.HEX20, 20),
            (CellType.PRISM15, 15),
            (CellType.PYRAMID13, 13),
        ],
    )
    def test_quadratic_node_counts(self, cell_type: CellType, n_nodes: int) -> None:
        """Test base nodes plus mid-edge (and center) nodes add up."""
        spec = CELL_TYPE_SPECS[cell_type]
        base = topology(cell_type).n_base_nodes
        assert spec.n_nodes == n_nodes
        assert base + len(spec.mid_edges) + int(spec.has_center_node) == n_nodes
        assert spec.order == 2

    def test_linear_cell_types_have_no_extra_nodes(self) -> None:
        """Test that linear cell types consist of base nodes only."""
        for cell_type, spec in CELL_TYPE_SPECS.items():
            if spec.order == 1:
                assert spec.n_nodes == topology(cell_type).n_base_nodes

    def test_mid_edges_are_topology_edges(self) -> None:
        """Test that higher-order nodes sit on edges of the family."""
        for cell_type, spec in CELL_TYPE_SPECS.items():
            edges = {frozenset(e) for e in topology(cell_type).edges}
            for edge in spec.mid_edges:
                assert frozenset(edge) in edges


class TestFamilyTopology:
    """Tests for face and edge tables."""

    @pytest.mark.parametrize(
        "family,n_faces,n_edges",
        [
            (ElementFamily.POINT, 0, 0),
            (ElementFamily.LINE, 2, 1),
            (ElementFamily.TRI, 3, 3),
            (ElementFamily.QUAD, 4, 4),
            (ElementFamily.TET, 4, 6),
            (ElementFamily.HEX, 6, 12),
            (ElementFamily.PRISM, 5, 9),
            (ElementFamily.PYRAMID, 5, 8),
        ],
    )
    def test_counts(self, family: ElementFamily, n_faces: int, n_edges: int) -> None:
        """Test face and edge counts per family."""
        topo = FAMILY_TOPOLOGY[family]
        assert topo.n_faces == n_faces
        assert topo.n_edges == n_edges

    def test_faces_reference_base_nodes(self) -> None:
        """Test that face tables only use base node indices."""
        for topo in FAMILY_TOPOLOGY.values():
            for face in topo.faces:
                assert all(0 <= i < topo.n_base_nodes for i in face)

    def test_each_edge_in_two_faces_of_volumes(self) -> None:
        """Test that 3D faces close up: every edge borders exactly two faces."""
        for family in (
            ElementFamily.TET,
            ElementFamily.HEX,
            ElementFamily.PRISM,
            ElementFamily.PYRAMID,
        ):
            topo = FAMILY_TOPOLOGY[family]
            for a, b in topo.edges:
                count = 0
                for face in topo.faces:
                    cyclic = list(zip(face, face[1:] + face[:1], strict=True))
                    if (a, b) in cyclic or (b, a) in cyclic:
                        count += 1
                assert count == 2, (family, (a, b))

    def test_reference_node_dimension(self) -> None:
        """Test that reference coordinates match the family dimension."""
        for topo in FAMILY_TOPOLOGY.values():
            assert len(topo.reference_nodes) == topo.n_base_nodes
            for coords in topo.reference_nodes:
                assert len(coords) == topo.dimension


class TestCellTypeHelpers:
    """Tests for cell type helper functions."""

    def test_linear_cell_type(self) -> None:
        """Test mapping to the linear cell type of the same family."""
        assert linear_cell_type(CellType.HEX20) == CellType.HEX8
        assert linear_cell_type(CellType.QUAD9) == CellType.QUAD4
        assert linear_cell_type(CellType.TRI3) == CellType.TRI3

    def test_cell_type_from_string(self) -> None:
        """Test case-insensitive lookup by name."""
        assert cell_type_from_string("tet10") == CellType.TET10
        assert cell_type_from_string(" PYRAMID5 ") == CellType.PYRAMID5

    def test_cell_type_from_string_unknown(self) -> None:
        """Test that an unknown name is a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown cell type"):
            cell_type_from_string("hex27")

    def test_str(self) -> None:
        """Test that cell types print as their name."""
        assert str(CellType.PRISM15) == "PRISM15"
