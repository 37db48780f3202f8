"""Unit tests for NodePartitionedMesh."""

from __future__ import annotations

import numpy as np
import pytest

from pythm.core.cell_types import CellType
from pythm.core.elements import Element, Node
from pythm.core.exceptions import MeshError
from pythm.core.mesh import MeshIdGenerator
from pythm.core.partitioned_mesh import NodePartitionedMesh
from pythm.sample_meshes import create_line_mesh


@pytest.fixture
def partition(id_generator: MeshIdGenerator) -> NodePartitionedMesh:
    """
    Rank 0 of a two-rank quadratic line mesh.

    Local layout: 3 active base, 2 active extra, 1 ghost base, 1 ghost extra.
    Rank 0 owns global nodes 0-4, rank 1 owns 5-7.
    """
    active_base = [Node(id=0, x=0.0, y=0.0), Node(id=1, x=1.0, y=0.0), Node(id=2, x=2.0, y=0.0)]
    active_extra = [Node(id=3, x=0.5, y=0.0), Node(id=4, x=1.5, y=0.0)]
    ghost_base = [Node(id=5, x=3.0, y=0.0)]
    ghost_extra = [Node(id=7, x=2.5, y=0.0)]
    a0, a1, a2 = active_base
    m01, m12 = active_extra
    elements = [
        Element(CellType.LINE3, [a0, a1, m01]),
        Element(CellType.LINE3, [a1, a2, m12]),
        Element(CellType.LINE3, [a2, ghost_base[0], ghost_extra[0]]),
    ]
    return NodePartitionedMesh.from_node_groups(
        "rank0",
        active_base,
        active_extra,
        ghost_base,
        ghost_extra,
        elements,
        n_global_base_nodes=5,
        n_global_nodes=8,
        n_active_base_nodes_at_rank=[3, 2],
        n_active_high_order_nodes_at_rank=[2, 1],
        id_generator=id_generator,
    )


class TestNodePartitionedMesh:
    """Tests for a partition with ghost nodes."""

    def test_counts(self, partition: NodePartitionedMesh) -> None:
        """Test local, active and global node counts."""
        assert partition.n_nodes == 7
        assert partition.n_active_base_nodes == 3
        assert partition.n_active_nodes == 5
        assert partition.n_ghost_nodes == 2
        assert partition.n_global_base_nodes == 5
        assert partition.n_global_nodes == 8
        assert not partition.is_for_single_thread

    def test_ghost_nodes_follow_active_nodes(self, partition: NodePartitionedMesh) -> None:
        """Test the ghost predicate on the local layout."""
        assert [partition.is_ghost_node(i) for i in range(7)] == [False] * 5 + [True] * 2

    def test_global_node_ids(self, partition: NodePartitionedMesh) -> None:
        """Test that global ids are taken from the incoming nodes."""
        np.testing.assert_array_equal(partition.global_node_ids, [0, 1, 2, 3, 4, 5, 7])
        assert partition.global_node_id(6) == 7
        assert [n.id for n in partition.nodes] == list(range(7))

    def test_rank_queries(self, partition: NodePartitionedMesh) -> None:
        """Test per-rank counts, offsets and owner lookup."""
        assert partition.n_partitions == 2
        assert partition.n_active_base_nodes_at_rank(1) == 2
        assert partition.n_active_high_order_nodes_at_rank(0) == 2
        assert partition.global_offset(0) == 0
        assert partition.global_offset(1) == 5
        assert [partition.partition_id(g) for g in range(8)] == [0] * 5 + [1] * 3

    def test_maximum_n_connected_nodes(self, partition: NodePartitionedMesh) -> None:
        """Test the largest node adjacency."""
        assert partition.maximum_n_connected_nodes() == 5

    def test_base_nodes_from_groups(self, partition: NodePartitionedMesh) -> None:
        """Test that active and ghost base nodes form the base node count."""
        assert partition.n_base_nodes == 4
        assert partition.largest_active_node_id == 6

    def test_extra_nodes_before_ghost_base_nodes_warn(
        self, caplog: pytest.LogCaptureFixture, id_generator: MeshIdGenerator
    ) -> None:
        """Test that the partition layout is reported as unusual node order."""
        base = [Node(id=0, x=0.0, y=0.0)]
        extra = [Node(id=1, x=0.5, y=0.0)]
        ghost = [Node(id=2, x=1.0, y=0.0)]
        with caplog.at_level("WARNING", logger="pythm.core.mesh"):
            pmesh = NodePartitionedMesh.from_node_groups(
                "p",
                base,
                extra,
                ghost,
                [],
                [Element(CellType.LINE3, [base[0], ghost[0], extra[0]])],
                id_generator=id_generator,
            )

        assert pmesh.n_base_nodes == 2
        assert pmesh.largest_active_node_id == 3
        assert "nonlinear node" in caplog.text

    def test_explicit_global_ids(self, id_generator: MeshIdGenerator) -> None:
        """Test construction with a separate global id list."""
        nodes = [Node(id=0, x=0.0, y=0.0), Node(id=1, x=1.0, y=0.0)]
        pmesh = NodePartitionedMesh(
            "p",
            nodes,
            [10, 11],
            [Element(CellType.LINE2, nodes)],
            n_global_base_nodes=12,
            n_global_nodes=12,
            n_active_base_nodes=1,
            n_active_nodes=1,
            id_generator=id_generator,
        )

        assert pmesh.global_node_id(1) == 11
        assert pmesh.is_ghost_node(1)
        assert pmesh.n_partitions == 0
        assert pmesh.n_base_nodes == 2
        assert pmesh.largest_active_node_id == 2

    def test_global_ids_length_mismatch(self) -> None:
        """Test that every node needs a global id."""
        nodes = [Node(id=0, x=0.0, y=0.0), Node(id=1, x=1.0, y=0.0)]
        with pytest.raises(MeshError, match="global node IDs"):
            NodePartitionedMesh(
                "p",
                nodes,
                [0],
                [],
                n_global_base_nodes=2,
                n_global_nodes=2,
                n_active_base_nodes=2,
                n_active_nodes=2,
            )

    def test_inconsistent_active_counts(self) -> None:
        """Test that more active than local nodes is rejected."""
        nodes = [Node(id=0, x=0.0, y=0.0)]
        with pytest.raises(MeshError, match="inconsistent active node counts"):
            NodePartitionedMesh(
                "p",
                nodes,
                None,
                [],
                n_global_base_nodes=1,
                n_global_nodes=1,
                n_active_base_nodes=1,
                n_active_nodes=2,
            )

    def test_rank_lists_length_mismatch(self) -> None:
        """Test that per-rank lists must describe the same ranks."""
        nodes = [Node(id=0, x=0.0, y=0.0)]
        with pytest.raises(MeshError, match="per-rank node counts"):
            NodePartitionedMesh(
                "p",
                nodes,
                None,
                [],
                n_global_base_nodes=1,
                n_global_nodes=1,
                n_active_base_nodes=1,
                n_active_nodes=1,
                n_active_base_nodes_at_rank=[1, 0],
                n_active_high_order_nodes_at_rank=[0],
            )

    def test_repr(self, partition: NodePartitionedMesh) -> None:
        """Test string representation."""
        assert "n_active_nodes=5" in repr(partition)


class TestFromMesh:
    """Tests for wrapping a global mesh as a single partition."""

    def test_linear_mesh(self) -> None:
        """Test that every node is active and owned by rank 0."""
        mesh = create_line_mesh(n_elements=3)
        pmesh = NodePartitionedMesh.from_mesh(mesh)

        assert pmesh.is_for_single_thread
        assert pmesh.id != mesh.id
        assert pmesh.n_nodes == 4
        assert pmesh.n_active_nodes == pmesh.n_global_nodes == 4
        assert pmesh.n_ghost_nodes == 0
        np.testing.assert_array_equal(pmesh.global_node_ids, np.arange(4))
        assert pmesh.n_partitions == 1
        assert pmesh.global_offset(0) == 0
        assert pmesh.partition_id(3) == 0

    def test_quadratic_mesh(self) -> None:
        """Test rank counts of a mesh with higher-order nodes."""
        mesh = create_line_mesh(n_elements=2, cell_type=CellType.LINE3)
        pmesh = NodePartitionedMesh.from_mesh(mesh)

        assert pmesh.n_active_base_nodes == 3
        assert pmesh.n_active_nodes == 5
        assert pmesh.n_active_base_nodes_at_rank(0) == 3
        assert pmesh.n_active_high_order_nodes_at_rank(0) == 2
        assert pmesh.partition_id(4) == 0
        assert pmesh.largest_active_node_id == pmesh.n_nodes

    def test_source_not_shared(self) -> None:
        """Test that the wrapped mesh is a copy."""
        mesh = create_line_mesh(n_elements=3)
        pmesh = NodePartitionedMesh.from_mesh(mesh)

        assert all(a is not b for a, b in zip(pmesh.nodes, mesh.nodes, strict=True))
        assert pmesh.elements[1].neighbors == mesh.elements[1].neighbors

    def test_connected_nodes_on_copy(self) -> None:
        """Test that adjacency queries work without stored node adjacency."""
        pmesh = NodePartitionedMesh.from_mesh(create_line_mesh(n_elements=3))
        assert pmesh.maximum_n_connected_nodes() == 3
