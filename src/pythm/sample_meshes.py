"""
Sample mesh generators for pythm documentation and testing.

This module provides functions to create small structured meshes of lines,
triangles, quadrilaterals and hexahedra, linear or quadratic. Higher-order
nodes are numbered after all base nodes.

Example
-------
>>> from pythm.sample_meshes import create_rectangular_mesh
>>> mesh = create_rectangular_mesh(nx=3, ny=2)
>>> print(f"Sample mesh: {mesh.n_nodes} nodes, {mesh.n_elements} elements")
Sample mesh: 12 nodes, 6 elements
"""

from __future__ import annotations

import numpy as np

from pythm.core.cell_types import CELL_TYPE_SPECS, CellType, linear_cell_type
from pythm.core.elements import Element, Node
from pythm.core.exceptions import ConfigurationError
from pythm.core.mesh import Mesh
from pythm.core.properties import MeshItemType

Coordinates = tuple[float, float, float]


def _add_higher_order_nodes(
    points: list[Coordinates],
    connectivity: list[list[int]],
    cell_type: CellType,
) -> list[list[int]]:
    """Append mid-edge (and center) points and return the full connectivity."""
    spec = CELL_TYPE_SPECS[cell_type]
    if spec.order == 1:
        return connectivity

    mid_nodes: dict[frozenset[int], int] = {}
    result = []
    for base in connectivity:
        conn = list(base)
        for a, b in spec.mid_edges:
            key = frozenset((base[a], base[b]))
            if key not in mid_nodes:
                mid = (np.asarray(points[base[a]]) + np.asarray(points[base[b]])) / 2.0
                mid_nodes[key] = len(points)
                points.append(tuple(float(c) for c in mid))
            conn.append(mid_nodes[key])
        if spec.has_center_node:
            center = np.mean([points[i] for i in base], axis=0)
            conn.append(len(points))
            points.append(tuple(float(c) for c in center))
        result.append(conn)
    return result


def _build_mesh(
    name: str,
    points: list[Coordinates],
    connectivity: list[list[int]],
    cell_type: CellType,
) -> Mesh:
    nodes = [Node(id=i, x=x, y=y, z=z) for i, (x, y, z) in enumerate(points)]
    elements = [
        Element(cell_type, [nodes[i] for i in conn]) for conn in connectivity
    ]
    return Mesh(name, nodes, elements)


def _check_cell_type(cell_type: CellType, allowed: tuple[CellType, ...]) -> None:
    if cell_type not in allowed:
        names = ", ".join(str(c) for c in allowed)
        raise ConfigurationError(
            f"Cell type {cell_type} is not supported here (supported: {names})"
        )


def create_line_mesh(
    n_elements: int = 10,
    length: float = 1.0,
    cell_type: CellType = CellType.LINE2,
    name: str = "line",
) -> Mesh:
    """
    Create a mesh of line elements along the x axis.

    Parameters
    ----------
    n_elements : int, optional
        Number of elements. Default is 10.
    length : float, optional
        Total length. Default is 1.0.
    cell_type : CellType, optional
        ``LINE2`` (default) or ``LINE3``.
    name : str, optional
        Mesh name.

    Returns
    -------
    Mesh
        The line mesh.

    Example
    -------
    >>> mesh = create_line_mesh(n_elements=4, length=2.0)
    >>> mesh.min_edge_length
    0.5
    """
    _check_cell_type(cell_type, (CellType.LINE2, CellType.LINE3))
    dx = length / n_elements
    points: list[Coordinates] = [(i * dx, 0.0, 0.0) for i in range(n_elements + 1)]
    connectivity = [[i, i + 1] for i in range(n_elements)]
    connectivity = _add_higher_order_nodes(points, connectivity, cell_type)
    return _build_mesh(name, points, connectivity, cell_type)


def create_rectangular_mesh(
    nx: int = 4,
    ny: int = 4,
    dx: float = 1.0,
    dy: float = 1.0,
    cell_type: CellType = CellType.QUAD4,
    name: str = "rectangle",
    material_ids: bool = False,
) -> Mesh:
    """
    Create a structured mesh of a rectangle in the xy plane.

    Parameters
    ----------
    nx, ny : int, optional
        Number of cells in x and y direction. Default is 4.
    dx, dy : float, optional
        Cell size. Default is 1.0.
    cell_type : CellType, optional
        ``QUAD4`` (default), ``QUAD8``, ``QUAD9``, ``TRI3`` or ``TRI6``.
        Triangle meshes split every cell along its lower-left to
        upper-right diagonal.
    name : str, optional
        Mesh name.
    material_ids : bool, optional
        If True, add a ``MaterialIDs`` cell property with one material per
        row of cells.

    Returns
    -------
    Mesh
        The rectangular mesh.
    """
    _check_cell_type(
        cell_type,
        (CellType.QUAD4, CellType.QUAD8, CellType.QUAD9, CellType.TRI3, CellType.TRI6),
    )
    points: list[Coordinates] = [
        (i * dx, j * dy, 0.0) for j in range(ny + 1) for i in range(nx + 1)
    ]
    triangles = linear_cell_type(cell_type) == CellType.TRI3

    connectivity: list[list[int]] = []
    rows: list[int] = []
    for j in range(ny):
        for i in range(nx):
            n1 = j * (nx + 1) + i
            n2 = n1 + 1
            n3 = n2 + nx + 1
            n4 = n1 + nx + 1
            if triangles:
                connectivity.extend([[n1, n2, n3], [n1, n3, n4]])
                rows.extend([j, j])
            else:
                connectivity.append([n1, n2, n3, n4])
                rows.append(j)

    connectivity = _add_higher_order_nodes(points, connectivity, cell_type)
    mesh = _build_mesh(name, points, connectivity, cell_type)
    if material_ids:
        pv = mesh.properties.create_new_property_vector(
            "MaterialIDs", MeshItemType.CELL, dtype=int, n_items=mesh.n_elements
        )
        pv[:] = rows
    return mesh


def create_cuboid_mesh(
    nx: int = 2,
    ny: int = 2,
    nz: int = 2,
    dx: float = 1.0,
    dy: float = 1.0,
    dz: float = 1.0,
    cell_type: CellType = CellType.HEX8,
    name: str = "cuboid",
) -> Mesh:
    """
    Create a structured hexahedral mesh of a cuboid.

    Parameters
    ----------
    nx, ny, nz : int, optional
        Number of cells per direction. Default is 2.
    dx, dy, dz : float, optional
        Cell size. Default is 1.0.
    cell_type : CellType, optional
        ``HEX8`` (default) or ``HEX20``.
    name : str, optional
        Mesh name.

    Returns
    -------
    Mesh
        The cuboid mesh.
    """
    _check_cell_type(cell_type, (CellType.HEX8, CellType.HEX20))
    points: list[Coordinates] = [
        (i * dx, j * dy, k * dz)
        for k in range(nz + 1)
        for j in range(ny + 1)
        for i in range(nx + 1)
    ]

    def index(i: int, j: int, k: int) -> int:
        return (k * (ny + 1) + j) * (nx + 1) + i

    connectivity = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                bottom = [
                    index(i, j, k),
                    index(i + 1, j, k),
                    index(i + 1, j + 1, k),
                    index(i, j + 1, k),
                ]
                top = [n + (nx + 1) * (ny + 1) for n in bottom]
                connectivity.append(bottom + top)

    connectivity = _add_higher_order_nodes(points, connectivity, cell_type)
    return _build_mesh(name, points, connectivity, cell_type)
