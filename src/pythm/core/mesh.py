"""
Mesh class and derived mesh operations.

This module provides the core mesh data structure:

- :class:`Mesh`: Owns the node and element lists and derives the mesh
  topology (dimension, node-element incidence, node adjacency, element
  neighbors, edge length range) once at construction.
- :class:`MeshIdGenerator`: Source of unique mesh identifiers.

and the mesh-level helpers :func:`material_ids`,
:func:`scale_property_vector`, :func:`add_property_to_mesh` and
:func:`create_mesh_from_element_selection`.

Example
-------
Two triangles sharing an edge:

>>> from pythm.core.cell_types import CellType
>>> from pythm.core.elements import Element, Node
>>> from pythm.core.mesh import Mesh
>>> nodes = [
...     Node(id=0, x=0.0, y=0.0),
...     Node(id=1, x=1.0, y=0.0),
...     Node(id=2, x=0.0, y=1.0),
...     Node(id=3, x=1.0, y=1.0),
... ]
>>> elements = [
...     Element(CellType.TRI3, [nodes[0], nodes[1], nodes[2]]),
...     Element(CellType.TRI3, [nodes[1], nodes[3], nodes[2]]),
... ]
>>> mesh = Mesh("two_triangles", nodes, elements)
>>> mesh.elements[0].neighbors
[None, 1, None]
>>> nodes[1].elements
[0, 1]
"""

from __future__ import annotations

import itertools
import logging
import math
import threading
from typing import Any, Iterator, Sequence

import numpy as np
from numpy.typing import NDArray

from pythm.core.elements import Element, Node
from pythm.core.exceptions import MeshError, ValidationError
from pythm.core.properties import MeshItemType, Properties, PropertyVector

logger = logging.getLogger(__name__)


class MeshIdGenerator:
    """
    Thread-safe source of monotonically increasing mesh identifiers.

    Examples
    --------
    >>> ids = MeshIdGenerator()
    >>> ids.next_id(), ids.next_id()
    (0, 1)
    """

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        """Return the next unused identifier."""
        with self._lock:
            return next(self._counter)


_default_id_generator = MeshIdGenerator()


class Mesh:
    """
    A finite element mesh.

    The mesh takes ownership of ``nodes`` and ``elements``: node and element
    IDs are reset to their list positions and the incidence and adjacency
    information stored on them is recomputed.

    Parameters
    ----------
    name : str
        Mesh name.
    nodes : sequence of Node
        Mesh nodes.
    elements : sequence of Element
        Mesh elements. Their node references must point into ``nodes``.
    properties : Properties, optional
        Property vectors defined on the mesh.
    n_base_nodes : int, optional
        Number of base (linear) nodes. If 0 (default), it is inferred as one
        plus the largest base node index used by any element.
    id_generator : MeshIdGenerator, optional
        Source of the mesh identifier. A process-wide default is used if
        omitted.

    Raises
    ------
    MeshError
        If ``n_base_nodes`` exceeds the number of nodes.
    """

    def __init__(
        self,
        name: str,
        nodes: Sequence[Node],
        elements: Sequence[Element],
        properties: Properties | None = None,
        n_base_nodes: int = 0,
        *,
        id_generator: MeshIdGenerator | None = None,
    ) -> None:
        self._id_generator = id_generator or _default_id_generator
        self._id = self._id_generator.next_id()
        self._name = name
        self._nodes: list[Node] = list(nodes)
        self._elements: list[Element] = list(elements)
        self._properties = properties if properties is not None else Properties()
        self._dimension = 0
        self._edge_length: tuple[float, float] = (math.inf, 0.0)

        if n_base_nodes > len(self._nodes):
            raise MeshError(
                f"Mesh '{name}': number of base nodes ({n_base_nodes}) exceeds "
                f"number of nodes ({len(self._nodes)})"
            )
        self._n_base_nodes = n_base_nodes

        self.reset_node_ids()
        self.reset_element_ids()
        inferred_base_nodes = n_base_nodes == 0
        if inferred_base_nodes:
            self.recalculate_max_base_node_id()
        if (inferred_base_nodes and self.has_nonlinear_element()) or self.is_nonlinear:
            self.check_nonlinear_node_ids()
        self.set_dimension()
        self.set_elements_connected_to_nodes()
        self.set_nodes_connected_by_elements()
        self.set_element_neighbors()
        self.calc_edge_length_range()

    def _init_copy(self, other: Mesh, name: str | None = None) -> None:
        """Initialize this instance as a deep copy of ``other``."""
        self._id_generator = other._id_generator
        self._id = self._id_generator.next_id()
        self._name = other.name if name is None else name
        self._dimension = other.dimension
        self._edge_length = other._edge_length
        self._n_base_nodes = other.n_base_nodes
        self._properties = other.properties.copy()

        self._nodes = [node.copy() for node in other.nodes]
        self._elements = [
            element.clone([self._nodes[node.id] for node in element.nodes])
            for element in other.elements
        ]

        if self._dimension == 0:
            self.set_dimension()
        self.set_elements_connected_to_nodes()
        # Node adjacency is left empty on copies; see set_nodes_connected_by_elements.
        self.set_element_neighbors()

    def copy(self, name: str | None = None) -> Mesh:
        """
        Return a deep copy with a new mesh id.

        Nodes and elements are cloned, incidence and element neighbors are
        recomputed. Node adjacency (``Node.connected_nodes``) is *not*
        recomputed; call :meth:`set_nodes_connected_by_elements` on the
        copy if it is needed.
        """
        mesh = Mesh.__new__(Mesh)
        mesh._init_copy(self, name)
        return mesh

    def __copy__(self) -> Mesh:
        return self.copy()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def id(self) -> int:
        """Return the unique mesh identifier."""
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def nodes(self) -> list[Node]:
        return self._nodes

    @property
    def elements(self) -> list[Element]:
        return self._elements

    @property
    def n_nodes(self) -> int:
        """Return number of nodes in the mesh."""
        return len(self._nodes)

    @property
    def n_elements(self) -> int:
        """Return number of elements in the mesh."""
        return len(self._elements)

    @property
    def n_base_nodes(self) -> int:
        """Return number of base (linear) nodes."""
        return self._n_base_nodes

    @property
    def dimension(self) -> int:
        """Return the largest element dimension."""
        return self._dimension

    @property
    def properties(self) -> Properties:
        return self._properties

    @property
    def min_edge_length(self) -> float:
        return self._edge_length[0]

    @property
    def max_edge_length(self) -> float:
        return self._edge_length[1]

    @property
    def is_nonlinear(self) -> bool:
        """Return True if the mesh has nodes other than base nodes."""
        return self.n_nodes != self._n_base_nodes

    @property
    def coordinates(self) -> NDArray[np.float64]:
        """Return node coordinates as (n_nodes, 3) array, in node ID order."""
        if not self._nodes:
            return np.zeros((0, 3))
        return np.array([(node.x, node.y, node.z) for node in self._nodes])

    @property
    def bounding_box(self) -> tuple[float, float, float, float, float, float]:
        """
        Return bounding box as (xmin, ymin, zmin, xmax, ymax, zmax).

        Raises
        ------
        MeshError
            If the mesh has no nodes.
        """
        if not self._nodes:
            raise MeshError(f"Mesh '{self._name}' has no nodes")
        coords = self.coordinates
        lo = coords.min(axis=0)
        hi = coords.max(axis=0)
        return (
            float(lo[0]), float(lo[1]), float(lo[2]),
            float(hi[0]), float(hi[1]), float(hi[2]),
        )  # fmt: skip

    def get_node(self, node_id: int) -> Node:
        """Get a node by ID. Raises IndexError if not found."""
        return self._nodes[node_id]

    def get_element(self, element_id: int) -> Element:
        """Get an element by ID. Raises IndexError if not found."""
        return self._elements[element_id]

    @staticmethod
    def get_node_index(element: Element, local_index: int) -> int:
        """Return the mesh node ID of ``element``'s local node ``local_index``."""
        return element.nodes[local_index].id

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate over nodes in ID order."""
        return iter(self._nodes)

    def iter_elements(self) -> Iterator[Element]:
        """Iterate over elements in ID order."""
        return iter(self._elements)

    def has_nonlinear_element(self) -> bool:
        """Return True if any element has higher-order nodes."""
        return any(not element.is_linear for element in self._elements)

    # ------------------------------------------------------------------
    # Topology construction
    # ------------------------------------------------------------------

    def add_element(self, element: Element) -> None:
        """
        Append an element and register it with its nodes.

        The element gets the ID of its list position. IDs of the other
        elements, node adjacency, element neighbors and the edge length
        range are not updated.
        """
        element.id = len(self._elements)
        self._elements.append(element)
        for node in element.nodes:
            node.elements.append(element.id)

    def reset_node_ids(self) -> None:
        """Set each node's ID to its position in the node list."""
        for i, node in enumerate(self._nodes):
            node.id = i

    def reset_element_ids(self) -> None:
        """Set each element's ID to its position in the element list."""
        for i, element in enumerate(self._elements):
            element.id = i

    def recalculate_max_base_node_id(self) -> None:
        """Set the base node count to one past the largest base node ID."""
        max_base_node_id = -1
        for element in self._elements:
            for node in element.base_nodes:
                max_base_node_id = max(max_base_node_id, node.id)
        self._n_base_nodes = max_base_node_id + 1

    def check_nonlinear_node_ids(self) -> None:
        """
        Warn if a higher-order node has an ID below the base node count.

        Some operations assume that all base nodes come first in the node
        list; the mesh is still usable otherwise.
        """
        for element in self._elements:
            for node in element.nodes[element.n_base_nodes :]:
                if node.id >= self._n_base_nodes:
                    continue
                logger.warning(
                    "Found a nonlinear node whose ID (%d) is smaller than the number "
                    "of base node IDs (%d). Some functions may not work properly.",
                    node.id,
                    self._n_base_nodes,
                )
                return

    def set_dimension(self) -> None:
        """Set the mesh dimension to the largest element dimension."""
        for element in self._elements:
            self._dimension = max(self._dimension, element.dimension)

    def set_elements_connected_to_nodes(self) -> None:
        """Register each element in the incidence list of its nodes."""
        for node in self._nodes:
            node.elements = []
        for element in self._elements:
            for node in element.nodes:
                node.elements.append(element.id)

    def set_nodes_connected_by_elements(self) -> None:
        """Compute ``Node.connected_nodes`` for all nodes."""
        for node, connected in zip(
            self._nodes, calculate_nodes_connected_by_elements(self), strict=True
        ):
            node.connected_nodes = connected

    def set_element_neighbors(self) -> None:
        """
        Link elements sharing a full face, symmetrically.

        Candidates are the elements incident to any of an element's base
        nodes.
        """
        for element in self._elements:
            candidates = sorted(
                {eid for node in element.base_nodes for eid in node.elements}
            )
            for eid in candidates:
                neighbor = self._elements[eid]
                opposite_face = element.add_neighbor(neighbor)
                if opposite_face is not None:
                    neighbor.set_neighbor(element.id, opposite_face)

    def calc_edge_length_range(self) -> None:
        """Compute the global minimum and maximum edge length."""
        min_length, max_length = math.inf, 0.0
        for element in self._elements:
            elem_min, elem_max = element.compute_sqr_edge_length_range()
            min_length = min(min_length, elem_min)
            max_length = max(max_length, elem_max)
        self._edge_length = (math.sqrt(min_length), math.sqrt(max_length))

    def validate(self) -> None:
        """
        Validate mesh integrity.

        Raises
        ------
        ValidationError
            If IDs are not dense, an element references a node owned by
            another mesh, an element repeats a node, or the neighbor
            relation is not symmetric.
        """
        errors: list[str] = []
        for i, node in enumerate(self._nodes):
            if node.id != i:
                errors.append(f"Node at position {i} has ID {node.id}")
        for i, element in enumerate(self._elements):
            if element.id != i:
                errors.append(f"Element at position {i} has ID {element.id}")
            for node in element.nodes:
                if not (0 <= node.id < self.n_nodes and self._nodes[node.id] is node):
                    errors.append(
                        f"Element {element.id} references a node not owned by the "
                        f"mesh: {node!r}"
                    )
            if len(set(element.node_ids)) != element.n_nodes:
                errors.append(f"Element {element.id} has duplicate nodes")
            for neighbor_id in element.neighbors:
                if neighbor_id is None:
                    continue
                if not self._elements[neighbor_id].has_neighbor(element.id):
                    errors.append(
                        f"Element {element.id} lists {neighbor_id} as neighbor "
                        f"but not vice versa"
                    )
        if errors:
            raise ValidationError(f"Mesh '{self._name}' is invalid", errors=errors)

    def __repr__(self) -> str:
        return (
            f"Mesh(id={self._id}, name='{self._name}', n_nodes={self.n_nodes}, "
            f"n_elements={self.n_elements}, dimension={self._dimension})"
        )


def calculate_nodes_connected_by_elements(mesh: Mesh) -> list[list[int]]:
    """
    For each node, collect the IDs of all nodes of its incident elements.

    Returns
    -------
    list of list of int
        Sorted, duplicate-free node IDs per node, in node ID order. A node
        is connected to itself if it belongs to any element.
    """
    result: list[list[int]] = []
    for node in mesh.nodes:
        adjacent: set[int] = set()
        for eid in node.elements:
            adjacent.update(mesh.elements[eid].node_ids)
        result.append(sorted(adjacent))
    return result


def is_base_node(mesh: Mesh, node: Node) -> bool:
    """
    Return True if ``node`` is a base node.

    Unconnected nodes count as base nodes. Otherwise the node's local
    position in its first incident element decides.
    """
    if not node.elements:
        return True
    element = mesh.elements[node.elements[0]]
    return any(base is node for base in element.base_nodes)


def get_base_nodes(elements: Sequence[Element]) -> list[Node]:
    """Return the base nodes of ``elements``, deduplicated and sorted by ID."""
    base_nodes: dict[int, Node] = {}
    for element in elements:
        for node in element.base_nodes:
            base_nodes.setdefault(node.id, node)
    return [base_nodes[nid] for nid in sorted(base_nodes)]


def material_ids(mesh: Mesh) -> PropertyVector | None:
    """
    Return the ``MaterialIDs`` cell property, if present.

    Only a single-component integer cell property qualifies; None is
    returned otherwise.
    """
    properties = mesh.properties
    if properties.exists("MaterialIDs", MeshItemType.CELL, 1, int):
        return properties.get("MaterialIDs", MeshItemType.CELL, 1, int)
    return None


def scale_property_vector(mesh: Mesh, property_name: str, factor: float) -> None:
    """
    Multiply all values of a floating point property by ``factor``, in place.

    A missing property is reported as a warning and left alone.
    """
    if not mesh.properties.exists(property_name, dtype=float):
        logger.warning("Did not find PropertyVector '%s' for scaling.", property_name)
        return
    pv = mesh.properties.get(property_name, dtype=float)
    pv.data *= factor


def _n_items(mesh: Mesh, item_type: MeshItemType) -> int | None:
    if item_type == MeshItemType.NODE:
        return mesh.n_nodes
    if item_type == MeshItemType.CELL:
        return mesh.n_elements
    return None


def add_property_to_mesh(
    mesh: Mesh,
    name: str,
    item_type: MeshItemType,
    n_components: int,
    values: Sequence[Any] | NDArray,
) -> PropertyVector:
    """
    Attach ``values`` as a new property vector of ``mesh``.

    Raises
    ------
    MeshError
        If the number of values does not match the number of nodes or
        cells times ``n_components``, or the name is already taken.
    """
    data = np.array(values)
    n_items = _n_items(mesh, item_type)
    if n_items is not None and data.size != n_items * n_components:
        raise MeshError(
            f"Property '{name}': expected {n_items * n_components} values for "
            f"{n_items} {item_type.name.lower()} items with {n_components} "
            f"components, got {data.size}"
        )
    if name in mesh.properties:
        raise MeshError(f"Property '{name}' already exists in mesh '{mesh.name}'")
    pv = PropertyVector(name, item_type, n_components, data)
    mesh.properties.add_property_vector(pv)
    return pv


def create_mesh_from_element_selection(
    mesh_name: str,
    elements: Sequence[Element],
    *,
    id_generator: MeshIdGenerator | None = None,
) -> Mesh:
    """
    Create an independent mesh from a selection of elements.

    The new mesh consists of clones of ``elements`` bound to cloned nodes,
    so it does not share nodes or elements with the source mesh. Original
    IDs are kept in the integer properties ``bulk_element_ids`` (cells) and
    ``bulk_node_ids`` (nodes).

    Parameters
    ----------
    mesh_name : str
        Name of the new mesh.
    elements : sequence of Element
        Selected elements of one source mesh.
    id_generator : MeshIdGenerator, optional
        Source of the new mesh's identifier.

    Returns
    -------
    Mesh
        The new mesh. Nodes appear in order of first use by the selection.
    """
    logger.debug("Found %d elements in the mesh", len(elements))

    bulk_element_ids = [element.id for element in elements]

    nodes_map: dict[int, Node] = {}
    new_elements: list[Element] = []
    for element in elements:
        new_nodes = []
        for node in element.nodes:
            new_node = nodes_map.get(node.id)
            if new_node is None:
                new_node = nodes_map[node.id] = node.copy()
            new_nodes.append(new_node)
        new_elements.append(element.clone(new_nodes))

    bulk_node_ids = list(nodes_map)

    mesh = Mesh(
        mesh_name, list(nodes_map.values()), new_elements, id_generator=id_generator
    )
    add_property_to_mesh(
        mesh,
        "bulk_element_ids",
        MeshItemType.CELL,
        1,
        np.array(bulk_element_ids, dtype=np.int64),
    )
    add_property_to_mesh(
        mesh,
        "bulk_node_ids",
        MeshItemType.NODE,
        1,
        np.array(bulk_node_ids, dtype=np.int64),
    )
    return mesh
