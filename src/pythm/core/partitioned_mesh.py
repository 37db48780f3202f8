"""
Node-partitioned subdomain mesh for domain decomposition.

A :class:`NodePartitionedMesh` is the local part of a global mesh owned by
one rank. Its node list follows a fixed layout::

    | active base | active extra | ghost base | ghost extra |

where *extra* nodes are the higher-order nodes of quadratic elements and
*ghost* nodes are owned by other ranks. With this ordering a node is a
ghost node exactly if its local ID is ``>= n_active_nodes``.

Producing the partitions is not part of this package; the class only
stores the layout and answers queries about it.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from pythm.core.elements import Element, Node
from pythm.core.exceptions import MeshError
from pythm.core.mesh import (
    Mesh,
    MeshIdGenerator,
    calculate_nodes_connected_by_elements,
)
from pythm.core.properties import Properties

logger = logging.getLogger(__name__)


class NodePartitionedMesh(Mesh):
    """
    A subdomain mesh with global node numbering and ghost nodes.

    Parameters
    ----------
    name : str
        Mesh name.
    nodes : sequence of Node
        Local nodes in partition layout order (see module docstring).
    global_node_ids : sequence of int or None
        Global ID of each local node. If None, the IDs carried by ``nodes``
        on entry are used.
    elements : sequence of Element
        Local elements; ghost elements follow the regular ones.
    properties : Properties, optional
        Mesh properties.
    n_global_base_nodes, n_global_nodes : int
        Base and total node counts of the global mesh.
    n_active_base_nodes, n_active_nodes : int
        Base and total counts of nodes owned by this partition.
    n_active_base_nodes_at_rank, n_active_high_order_nodes_at_rank : sequence of int
        Active base and higher-order node counts of every rank.
    n_base_nodes : int, optional
        Number of local base nodes, active and ghost. Inferred from the
        elements if 0 (default); with ghost base nodes placed after the
        active extra nodes the inferred count then includes the latter.
    id_generator : MeshIdGenerator, optional
        Source of the mesh identifier.

    Raises
    ------
    MeshError
        If the active counts exceed the local node count, the rank lists
        differ in length, or ``global_node_ids`` does not cover all nodes.
    """

    def __init__(
        self,
        name: str,
        nodes: Sequence[Node],
        global_node_ids: Sequence[int] | None,
        elements: Sequence[Element],
        properties: Properties | None = None,
        *,
        n_global_base_nodes: int,
        n_global_nodes: int,
        n_active_base_nodes: int,
        n_active_nodes: int,
        n_active_base_nodes_at_rank: Sequence[int] = (),
        n_active_high_order_nodes_at_rank: Sequence[int] = (),
        n_base_nodes: int = 0,
        id_generator: MeshIdGenerator | None = None,
    ) -> None:
        if global_node_ids is None:
            global_node_ids = [node.id for node in nodes]
        if len(global_node_ids) != len(nodes):
            raise MeshError(
                f"Partitioned mesh '{name}': {len(global_node_ids)} global node IDs "
                f"for {len(nodes)} nodes"
            )
        if not n_active_base_nodes <= n_active_nodes <= len(nodes):
            raise MeshError(
                f"Partitioned mesh '{name}': inconsistent active node counts "
                f"(base {n_active_base_nodes}, all {n_active_nodes}, "
                f"local nodes {len(nodes)})"
            )
        if len(n_active_base_nodes_at_rank) != len(n_active_high_order_nodes_at_rank):
            raise MeshError(
                f"Partitioned mesh '{name}': per-rank node counts given for "
                f"{len(n_active_base_nodes_at_rank)} and "
                f"{len(n_active_high_order_nodes_at_rank)} ranks"
            )

        super().__init__(
            name, nodes, elements, properties, n_base_nodes, id_generator=id_generator
        )

        self._global_node_ids = np.asarray(global_node_ids, dtype=np.int64)
        self._n_global_base_nodes = n_global_base_nodes
        self._n_global_nodes = n_global_nodes
        self._n_active_base_nodes = n_active_base_nodes
        self._n_active_nodes = n_active_nodes
        self._set_rank_counts(
            n_active_base_nodes_at_rank, n_active_high_order_nodes_at_rank
        )
        self._is_single_thread = False

    def _set_rank_counts(
        self,
        n_active_base_nodes_at_rank: Sequence[int],
        n_active_high_order_nodes_at_rank: Sequence[int],
    ) -> None:
        self._n_active_base_nodes_at_rank = list(n_active_base_nodes_at_rank)
        self._n_active_high_order_nodes_at_rank = list(
            n_active_high_order_nodes_at_rank
        )
        per_rank = np.add(
            np.asarray(self._n_active_base_nodes_at_rank, dtype=np.int64),
            np.asarray(self._n_active_high_order_nodes_at_rank, dtype=np.int64),
        )
        self._end_node_id_at_rank = np.concatenate(([0], np.cumsum(per_rank)))

    @classmethod
    def from_mesh(cls, mesh: Mesh) -> NodePartitionedMesh:
        """
        Wrap a global mesh for a run without domain decomposition.

        The result is a copy of ``mesh`` in which every node is active,
        global IDs equal local IDs and there is a single rank.

        Examples
        --------
        >>> from pythm.sample_meshes import create_line_mesh
        >>> pmesh = NodePartitionedMesh.from_mesh(create_line_mesh(n_elements=3))
        >>> pmesh.is_for_single_thread, pmesh.n_partitions, pmesh.n_ghost_nodes
        (True, 1, 0)
        """
        pmesh = cls.__new__(cls)
        pmesh._init_copy(mesh)
        pmesh._global_node_ids = np.arange(pmesh.n_nodes, dtype=np.int64)
        pmesh._n_global_base_nodes = mesh.n_base_nodes
        pmesh._n_global_nodes = mesh.n_nodes
        pmesh._n_active_base_nodes = mesh.n_base_nodes
        pmesh._n_active_nodes = mesh.n_nodes
        pmesh._set_rank_counts(
            [mesh.n_base_nodes], [mesh.n_nodes - mesh.n_base_nodes]
        )
        pmesh._is_single_thread = True
        return pmesh

    @classmethod
    def from_node_groups(
        cls,
        name: str,
        active_base_nodes: Sequence[Node],
        active_extra_nodes: Sequence[Node],
        ghost_base_nodes: Sequence[Node],
        ghost_extra_nodes: Sequence[Node],
        elements: Sequence[Element],
        *,
        global_node_ids: Sequence[int] | None = None,
        properties: Properties | None = None,
        n_global_base_nodes: int | None = None,
        n_global_nodes: int | None = None,
        n_active_base_nodes_at_rank: Sequence[int] = (),
        n_active_high_order_nodes_at_rank: Sequence[int] = (),
        id_generator: MeshIdGenerator | None = None,
    ) -> NodePartitionedMesh:
        """
        Build a partitioned mesh from the four node groups.

        The groups are concatenated in layout order and the active counts
        and the local base node count are derived from the group sizes.
        Global counts default to the local ones.
        """
        nodes = [
            *active_base_nodes,
            *active_extra_nodes,
            *ghost_base_nodes,
            *ghost_extra_nodes,
        ]
        n_active_base = len(active_base_nodes)
        n_active = n_active_base + len(active_extra_nodes)
        n_base = n_active_base + len(ghost_base_nodes)
        logger.debug(
            "Partition '%s': %d active base, %d active extra, %d ghost base, "
            "%d ghost extra nodes",
            name,
            n_active_base,
            len(active_extra_nodes),
            len(ghost_base_nodes),
            len(ghost_extra_nodes),
        )
        return cls(
            name,
            nodes,
            global_node_ids,
            elements,
            properties,
            n_global_base_nodes=n_base if n_global_base_nodes is None else n_global_base_nodes,
            n_global_nodes=len(nodes) if n_global_nodes is None else n_global_nodes,
            n_active_base_nodes=n_active_base,
            n_active_nodes=n_active,
            n_active_base_nodes_at_rank=n_active_base_nodes_at_rank,
            n_active_high_order_nodes_at_rank=n_active_high_order_nodes_at_rank,
            n_base_nodes=n_base,
            id_generator=id_generator,
        )

    @property
    def global_node_ids(self) -> NDArray[np.int64]:
        return self._global_node_ids

    def global_node_id(self, node_id: int) -> int:
        """Return the global ID of local node ``node_id``."""
        return int(self._global_node_ids[node_id])

    @property
    def n_global_base_nodes(self) -> int:
        return self._n_global_base_nodes

    @property
    def n_global_nodes(self) -> int:
        return self._n_global_nodes

    @property
    def n_active_base_nodes(self) -> int:
        """Return number of base nodes owned by this partition."""
        return self._n_active_base_nodes

    @property
    def n_active_nodes(self) -> int:
        """Return number of nodes owned by this partition."""
        return self._n_active_nodes

    @property
    def n_ghost_nodes(self) -> int:
        return self.n_nodes - self._n_active_nodes

    def is_ghost_node(self, node_id: int) -> bool:
        """Return True if local node ``node_id`` is owned by another rank."""
        return node_id >= self._n_active_nodes

    @property
    def largest_active_node_id(self) -> int:
        """
        Return the bound on active node IDs for higher-order elements.

        This is ``n_base_nodes + n_active_nodes - n_active_base_nodes``,
        i.e. the local base node count shifted by the active extra nodes.
        """
        return self.n_base_nodes + self._n_active_nodes - self._n_active_base_nodes

    def n_active_base_nodes_at_rank(self, rank: int) -> int:
        return self._n_active_base_nodes_at_rank[rank]

    def n_active_high_order_nodes_at_rank(self, rank: int) -> int:
        return self._n_active_high_order_nodes_at_rank[rank]

    @property
    def n_partitions(self) -> int:
        """Return number of ranks described by the per-rank counts."""
        return len(self._n_active_base_nodes_at_rank)

    def global_offset(self, rank: int) -> int:
        """Return the first global node ID owned by ``rank``."""
        return int(self._end_node_id_at_rank[rank])

    def partition_id(self, global_node_id: int) -> int:
        """Return the rank owning the node with ID ``global_node_id``."""
        return (
            int(np.searchsorted(self._end_node_id_at_rank, global_node_id, side="right"))
            - 1
        )

    def maximum_n_connected_nodes(self) -> int:
        """Return the largest number of nodes connected to any node."""
        connected = calculate_nodes_connected_by_elements(self)
        return max((len(ids) for ids in connected), default=0)

    @property
    def is_for_single_thread(self) -> bool:
        return self._is_single_thread

    def __repr__(self) -> str:
        return (
            f"NodePartitionedMesh(id={self.id}, name='{self.name}', "
            f"n_nodes={self.n_nodes}, n_active_nodes={self._n_active_nodes}, "
            f"n_partitions={self.n_partitions})"
        )
