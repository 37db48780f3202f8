"""
Node and element classes for finite element meshes.

This module provides the mesh entities:

- :class:`Node`: Point in 3D space with incidence information
- :class:`Element`: Finite element of any :class:`~pythm.core.cell_types.CellType`

Elements hold references to their :class:`Node` objects. All reverse and
derived relations (a node's incident elements, a node's adjacent nodes, an
element's neighbors) are stored as integer IDs, i.e. indices into the node
and element lists owned by a :class:`~pythm.core.mesh.Mesh`.

Example
-------
>>> from pythm.core.cell_types import CellType
>>> from pythm.core.elements import Element, Node
>>> nodes = [Node(id=0, x=0.0, y=0.0), Node(id=1, x=1.0, y=0.0), Node(id=2, x=0.0, y=1.0)]
>>> tri = Element(CellType.TRI3, nodes)
>>> tri.n_faces
3
>>> tri.get_face_node_ids(1)
(1, 2)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from pythm.core.cell_types import (
    CELL_TYPE_SPECS,
    CellType,
    CellTypeSpec,
    ElementFamily,
    FamilyTopology,
    topology,
)
from pythm.core.exceptions import MeshError


@dataclass
class Node:
    """
    A mesh node with coordinates in 3D space.

    Parameters
    ----------
    id : int
        Node identifier. Reassigned by the mesh to the node's position in
        the mesh's node list.
    x, y, z : float
        Coordinates in model units.
    elements : list of int
        IDs of elements containing this node. Computed by the mesh.
    connected_nodes : list of int
        IDs of nodes sharing an element with this node (the node itself
        included), sorted. Computed by the mesh.

    Examples
    --------
    >>> n1 = Node(id=0, x=0.0, y=0.0)
    >>> n2 = Node(id=1, x=3.0, y=4.0)
    >>> n1.distance_to(n2)
    5.0
    """

    id: int
    x: float
    y: float
    z: float = 0.0
    elements: list[int] = field(default_factory=list)
    connected_nodes: list[int] = field(default_factory=list)

    @property
    def coordinates(self) -> NDArray[np.float64]:
        """Return (x, y, z) as numpy array."""
        return np.array([self.x, self.y, self.z])

    @property
    def n_elements(self) -> int:
        """Return number of elements this node is part of."""
        return len(self.elements)

    def sqr_distance_to(self, other: Node) -> float:
        """Calculate squared Euclidean distance to another node."""
        return (
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )

    def distance_to(self, other: Node) -> float:
        """Calculate Euclidean distance to another node."""
        return math.sqrt(self.sqr_distance_to(other))

    def copy(self) -> Node:
        """Return a node with the same id and coordinates but no incidence."""
        return Node(id=self.id, x=self.x, y=self.y, z=self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self.id == other.id
            and self.x == other.x
            and self.y == other.y
            and self.z == other.z
        )

    def __hash__(self) -> int:
        return hash((self.id, self.x, self.y, self.z))

    def __repr__(self) -> str:
        return f"Node(id={self.id}, x={self.x}, y={self.y}, z={self.z})"


@dataclass(eq=False)
class Element:
    """
    A finite element.

    The element's shape is given by its :class:`CellType`; the number and
    order of ``nodes`` must match the cell type's local numbering (base
    nodes first, then higher-order nodes).

    Parameters
    ----------
    cell_type : CellType
        Concrete element shape.
    nodes : list of Node
        Element nodes in local order.
    id : int, optional
        Element identifier. Reassigned by the mesh to the element's
        position in the mesh's element list.

    Attributes
    ----------
    neighbors : list of int or None
        One slot per face holding the ID of the element sharing that face,
        or None for boundary faces. Populated by the mesh.

    Raises
    ------
    MeshError
        If the number of nodes does not match the cell type.
    """

    cell_type: CellType
    nodes: list[Node]
    id: int = -1
    neighbors: list[int | None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate node count and allocate neighbor slots."""
        self.nodes = list(self.nodes)
        expected = self.spec.n_nodes
        if len(self.nodes) != expected:
            raise MeshError(
                f"Element {self.id}: {self.cell_type} requires {expected} nodes, "
                f"got {len(self.nodes)}"
            )
        self.neighbors = [None] * self.topology.n_faces

    @property
    def spec(self) -> CellTypeSpec:
        """Return the node layout of this element's cell type."""
        return CELL_TYPE_SPECS[self.cell_type]

    @property
    def topology(self) -> FamilyTopology:
        """Return the reference topology of this element's family."""
        return topology(self.cell_type)

    @property
    def family(self) -> ElementFamily:
        return self.spec.family

    @property
    def dimension(self) -> int:
        """Return the intrinsic dimension of the element."""
        return self.topology.dimension

    @property
    def order(self) -> int:
        return self.spec.order

    @property
    def n_nodes(self) -> int:
        """Return total number of nodes."""
        return len(self.nodes)

    @property
    def n_base_nodes(self) -> int:
        """Return number of corner nodes."""
        return self.topology.n_base_nodes

    @property
    def n_faces(self) -> int:
        """Return number of faces, i.e. number of neighbor slots."""
        return self.topology.n_faces

    n_neighbors = n_faces

    @property
    def n_edges(self) -> int:
        return self.topology.n_edges

    @property
    def is_linear(self) -> bool:
        """Return True if the element has no higher-order nodes."""
        return self.n_nodes == self.n_base_nodes

    @property
    def base_nodes(self) -> list[Node]:
        """Return the corner nodes."""
        return self.nodes[: self.n_base_nodes]

    @property
    def node_ids(self) -> tuple[int, ...]:
        """Return IDs of all nodes in local order."""
        return tuple(node.id for node in self.nodes)

    @property
    def base_node_ids(self) -> tuple[int, ...]:
        return tuple(node.id for node in self.base_nodes)

    @property
    def edges(self) -> list[tuple[int, int]]:
        """Return node ID pairs of the element's (base node) edges."""
        return [(self.nodes[a].id, self.nodes[b].id) for a, b in self.topology.edges]

    @property
    def is_boundary_element(self) -> bool:
        """Return True if at least one face has no neighbor."""
        return any(neighbor is None for neighbor in self.neighbors)

    def get_node(self, i: int) -> Node:
        """Get the node at local index ``i``."""
        return self.nodes[i]

    def face_nodes(self, face_index: int) -> list[Node]:
        """Return the base nodes of face ``face_index``."""
        return [self.nodes[i] for i in self.topology.faces[face_index]]

    def get_face_node_ids(self, face_index: int) -> tuple[int, ...]:
        """Return IDs of the base nodes of face ``face_index``."""
        return tuple(node.id for node in self.face_nodes(face_index))

    def has_neighbor(self, element_id: int) -> bool:
        return element_id in self.neighbors

    def center(self) -> NDArray[np.float64]:
        """Return the centroid of the base nodes."""
        return np.mean([node.coordinates for node in self.base_nodes], axis=0)

    def compute_sqr_edge_length_range(self) -> tuple[float, float]:
        """
        Compute minimum and maximum squared edge length.

        Only the base node edges are considered. Elements without edges
        (points) return ``(inf, 0.0)``.
        """
        min_length = math.inf
        max_length = 0.0
        for a, b in self.topology.edges:
            dist = self.nodes[a].sqr_distance_to(self.nodes[b])
            min_length = min(min_length, dist)
            max_length = max(max_length, dist)
        return min_length, max_length

    def add_neighbor(self, other: Element) -> int | None:
        """
        Link ``other`` as neighbor if both elements share a full face.

        Parameters
        ----------
        other : Element
            Candidate element, typically one sharing a base node.

        Returns
        -------
        int or None
            Index of the shared face in ``other``'s local numbering, so
            the caller can set the reverse link; None if nothing was linked.
        """
        if other is self or other.dimension != self.dimension:
            return None
        if self.has_neighbor(other.id):
            return None

        other_base = set(other.base_node_ids)
        other_faces = {
            frozenset(other.get_face_node_ids(j)): j for j in range(other.n_faces)
        }
        for i in range(self.n_faces):
            face = frozenset(self.get_face_node_ids(i))
            if not face <= other_base:
                continue
            opposite = other_faces.get(face)
            if opposite is not None:
                self.neighbors[i] = other.id
                return opposite
        return None

    def set_neighbor(self, element_id: int | None, face_index: int) -> None:
        """Store ``element_id`` in the neighbor slot of face ``face_index``."""
        self.neighbors[face_index] = element_id

    def clone(self, nodes: list[Node] | None = None) -> Element:
        """
        Return an element of the same type and id bound to ``nodes``.

        Neighbor slots of the clone are empty.
        """
        return Element(
            self.cell_type, list(self.nodes if nodes is None else nodes), id=self.id
        )

    def __repr__(self) -> str:
        return f"Element(id={self.id}, type={self.cell_type}, nodes={self.node_ids})"
