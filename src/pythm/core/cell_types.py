"""
Cell types and their reference topology.

The set of element shapes is closed: every element carries a :class:`CellType`
tag and all shape-specific data (faces, edges, base node count, reference
coordinates) is looked up in the tables of this module.

Local node numbering follows the VTK convention. Higher-order nodes come
after the base (corner) nodes, one per entry of :attr:`CellTypeSpec.mid_edges`,
followed by the center node of a ``QUAD9``.

Example
-------
>>> from pythm.core.cell_types import CELL_TYPE_SPECS, CellType, topology
>>> topology(CellType.TRI6).faces
((0, 1), (1, 2), (2, 0))
>>> CELL_TYPE_SPECS[CellType.TET10].n_nodes
10
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pythm.core.exceptions import ConfigurationError


class ElementFamily(Enum):
    """Geometric family of an element, independent of interpolation order."""

    POINT = "point"
    LINE = "line"
    TRI = "tri"
    QUAD = "quad"
    TET = "tet"
    HEX = "hex"
    PRISM = "prism"
    PYRAMID = "pyramid"


class CellType(Enum):
    """Concrete element shape including its interpolation order."""

    POINT1 = "point1"
    LINE2 = "line2"
    LINE3 = "line3"
    TRI3 = "tri3"
    TRI6 = "tri6"
    QUAD4 = "quad4"
    QUAD8 = "quad8"
    QUAD9 = "quad9"
    TET4 = "tet4"
    TET10 = "tet10"
    HEX8 = "hex8"
    HEX20 = "hex20"
    PRISM6 = "prism6"
    PRISM15 = "prism15"
    PYRAMID5 = "pyramid5"
    PYRAMID13 = "pyramid13"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FamilyTopology:
    """
    Reference topology shared by all cell types of one family.

    Attributes
    ----------
    dimension : int
        Intrinsic dimension of the element (0 to 3).
    n_base_nodes : int
        Number of corner nodes.
    edges : tuple of (int, int)
        Base-node local indices of each edge.
    faces : tuple of tuple of int
        Base-node local indices of each face. For 2D elements the faces are
        the edges, for 1D elements the two end points.
    reference_nodes : tuple of tuple of float
        Natural coordinates of the base nodes.
    """

    dimension: int
    n_base_nodes: int
    edges: tuple[tuple[int, int], ...]
    faces: tuple[tuple[int, ...], ...]
    reference_nodes: tuple[tuple[float, ...], ...]

    @property
    def n_faces(self) -> int:
        """Return number of faces (neighbor slots)."""
        return len(self.faces)

    @property
    def n_edges(self) -> int:
        """Return number of edges."""
        return len(self.edges)


@dataclass(frozen=True)
class CellTypeSpec:
    """
    Node layout of a concrete cell type.

    Attributes
    ----------
    family : ElementFamily
        Geometric family.
    n_nodes : int
        Total number of nodes.
    order : int
        Interpolation order (1 linear, 2 quadratic).
    mid_edges : tuple of (int, int)
        Base-node pair owning each higher-order node, in local node order.
    has_center_node : bool
        True if the last node is a face center node (``QUAD9``).
    """

    family: ElementFamily
    n_nodes: int
    order: int
    mid_edges: tuple[tuple[int, int], ...] = ()
    has_center_node: bool = False


_TRI_EDGES = ((0, 1), (1, 2), (2, 0))
_QUAD_EDGES = ((0, 1), (1, 2), (2, 3), (3, 0))
_TET_EDGES = ((0, 1), (1, 2), (2, 0), (0, 3), (1, 3), (2, 3))
_HEX_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)  # fmt: skip
_PRISM_EDGES = (
    (0, 1), (1, 2), (2, 0),
    (3, 4), (4, 5), (5, 3),
    (0, 3), (1, 4), (2, 5),
)  # fmt: skip
_PYRAMID_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (0, 4), (1, 4), (2, 4), (3, 4),
)  # fmt: skip


FAMILY_TOPOLOGY: dict[ElementFamily, FamilyTopology] = {
    ElementFamily.POINT: FamilyTopology(
        dimension=0,
        n_base_nodes=1,
        edges=(),
        faces=(),
        reference_nodes=((),),
    ),
    ElementFamily.LINE: FamilyTopology(
        dimension=1,
        n_base_nodes=2,
        edges=((0, 1),),
        faces=((0,), (1,)),
        reference_nodes=((-1.0,), (1.0,)),
    ),
    ElementFamily.TRI: FamilyTopology(
        dimension=2,
        n_base_nodes=3,
        edges=_TRI_EDGES,
        faces=_TRI_EDGES,
        reference_nodes=((0.0, 0.0), (1.0, 0.0), (0.0, 1.0)),
    ),
    ElementFamily.QUAD: FamilyTopology(
        dimension=2,
        n_base_nodes=4,
        edges=_QUAD_EDGES,
        faces=_QUAD_EDGES,
        reference_nodes=((-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)),
    ),
    ElementFamily.TET: FamilyTopology(
        dimension=3,
        n_base_nodes=4,
        edges=_TET_EDGES,
        faces=((0, 2, 1), (0, 1, 3), (1, 2, 3), (2, 0, 3)),
        reference_nodes=(
            (0.0, 0.0, 0.0),
            (1.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
            (0.0, 0.0, 1.0),
        ),
    ),
    ElementFamily.HEX: FamilyTopology(
        dimension=3,
        n_base_nodes=8,
        edges=_HEX_EDGES,
        faces=(
            (0, 3, 2, 1),
            (0, 1, 5, 4),
            (1, 2, 6, 5),
            (2, 3, 7, 6),
            (3, 0, 4, 7),
            (4, 5, 6, 7),
        ),
        reference_nodes=(
            (-1.0, -1.0, -1.0),
            (1.0, -1.0, -1.0),
            (1.0, 1.0, -1.0),
            (-1.0, 1.0, -1.0),
            (-1.0, -1.0, 1.0),
            (1.0, -1.0, 1.0),
            (1.0, 1.0, 1.0),
            (-1.0, 1.0, 1.0),
        ),
    ),
    ElementFamily.PRISM: FamilyTopology(
        dimension=3,
        n_base_nodes=6,
        edges=_PRISM_EDGES,
        faces=((0, 2, 1), (0, 1, 4, 3), (1, 2, 5, 4), (2, 0, 3, 5), (3, 4, 5)),
        reference_nodes=(
            (0.0, 0.0, -1.0),
            (1.0, 0.0, -1.0),
            (0.0, 1.0, -1.0),
            (0.0, 0.0, 1.0),
            (1.0, 0.0, 1.0),
            (0.0, 1.0, 1.0),
        ),
    ),
    # Base on zeta = 0, apex at zeta = 1.
    ElementFamily.PYRAMID: FamilyTopology(
        dimension=3,
        n_base_nodes=5,
        edges=_PYRAMID_EDGES,
        faces=((0, 1, 4), (1, 2, 4), (2, 3, 4), (3, 0, 4), (0, 3, 2, 1)),
        reference_nodes=(
            (-1.0, -1.0, 0.0),
            (1.0, -1.0, 0.0),
            (1.0, 1.0, 0.0),
            (-1.0, 1.0, 0.0),
            (0.0, 0.0, 1.0),
        ),
    ),
}


CELL_TYPE_SPECS: dict[CellType, CellTypeSpec] = {
    CellType.POINT1: CellTypeSpec(ElementFamily.POINT, n_nodes=1, order=1),
    CellType.LINE2: CellTypeSpec(ElementFamily.LINE, n_nodes=2, order=1),
    CellType.LINE3: CellTypeSpec(
        ElementFamily.LINE, n_nodes=3, order=2, mid_edges=((0, 1),)
    ),
    CellType.TRI3: CellTypeSpec(ElementFamily.TRI, n_nodes=3, order=1),
    CellType.TRI6: CellTypeSpec(
        ElementFamily.TRI, n_nodes=6, order=2, mid_edges=_TRI_EDGES
    ),
    CellType.QUAD4: CellTypeSpec(ElementFamily.QUAD, n_nodes=4, order=1),
    CellType.QUAD8: CellTypeSpec(
        ElementFamily.QUAD, n_nodes=8, order=2, mid_edges=_QUAD_EDGES
    ),
    CellType.QUAD9: CellTypeSpec(
        ElementFamily.QUAD,
        n_nodes=9,
        order=2,
        mid_edges=_QUAD_EDGES,
        has_center_node=True,
    ),
    CellType.TET4: CellTypeSpec(ElementFamily.TET, n_nodes=4, order=1),
    CellType.TET10: CellTypeSpec(
        ElementFamily.TET, n_nodes=10, order=2, mid_edges=_TET_EDGES
    ),
    CellType.HEX8: CellTypeSpec(ElementFamily.HEX, n_nodes=8, order=1),
    CellType.HEX20: CellTypeSpec(
        ElementFamily.HEX, n_nodes=20, order=2, mid_edges=_HEX_EDGES
    ),
    CellType.PRISM6: CellTypeSpec(ElementFamily.PRISM, n_nodes=6, order=1),
    CellType.PRISM15: CellTypeSpec(
        ElementFamily.PRISM, n_nodes=15, order=2, mid_edges=_PRISM_EDGES
    ),
    CellType.PYRAMID5: CellTypeSpec(ElementFamily.PYRAMID, n_nodes=5, order=1),
    CellType.PYRAMID13: CellTypeSpec(
        ElementFamily.PYRAMID, n_nodes=13, order=2, mid_edges=_PYRAMID_EDGES
    ),
}


_LINEAR_CELL_TYPES: dict[ElementFamily, CellType] = {
    ElementFamily.POINT: CellType.POINT1,
    ElementFamily.LINE: CellType.LINE2,
    ElementFamily.TRI: CellType.TRI3,
    ElementFamily.QUAD: CellType.QUAD4,
    ElementFamily.TET: CellType.TET4,
    ElementFamily.HEX: CellType.HEX8,
    ElementFamily.PRISM: CellType.PRISM6,
    ElementFamily.PYRAMID: CellType.PYRAMID5,
}


def topology(cell_type: CellType) -> FamilyTopology:
    """Return the reference topology of a cell type's family."""
    return FAMILY_TOPOLOGY[CELL_TYPE_SPECS[cell_type].family]


def linear_cell_type(cell_type: CellType) -> CellType:
    """Return the linear cell type of the same family (``HEX20`` -> ``HEX8``)."""
    return _LINEAR_CELL_TYPES[CELL_TYPE_SPECS[cell_type].family]


def cell_type_from_string(name: str) -> CellType:
    """
    Look up a cell type by name, case-insensitively.

    Raises
    ------
    ConfigurationError
        If the name does not denote a known cell type.
    """
    key = name.strip().upper()
    try:
        return CellType[key]
    except KeyError:
        raise ConfigurationError(f"Unknown cell type '{name}'") from None
