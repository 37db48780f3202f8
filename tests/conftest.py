"""Pytest configuration and fixtures for pythm tests."""

from __future__ import annotations

import numpy as np
import pytest

from pythm.core.cell_types import CellType
from pythm.core.elements import Element, Node
from pythm.core.mesh import Mesh, MeshIdGenerator


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: property-based tests (hypothesis)")


@pytest.fixture
def id_generator() -> MeshIdGenerator:
    """Return a fresh mesh id generator starting at 0."""
    return MeshIdGenerator()


@pytest.fixture
def square_nodes() -> list[Node]:
    """
    Nodes of the unit square.

    Layout:
        2---3
        |   |
        0---1
    """
    return [
        Node(id=0, x=0.0, y=0.0),
        Node(id=1, x=1.0, y=0.0),
        Node(id=2, x=0.0, y=1.0),
        Node(id=3, x=1.0, y=1.0),
    ]


@pytest.fixture
def two_triangle_mesh(square_nodes: list[Node], id_generator: MeshIdGenerator) -> Mesh:
    """
    Two triangles sharing the edge 1-2.

        2---3
        | \\ |
        0---1
    """
    nodes = square_nodes
    elements = [
        Element(CellType.TRI3, [nodes[0], nodes[1], nodes[2]]),
        Element(CellType.TRI3, [nodes[1], nodes[3], nodes[2]]),
    ]
    return Mesh("two_triangles", nodes, elements, id_generator=id_generator)


@pytest.fixture
def unit_triangle_mesh(id_generator: MeshIdGenerator) -> Mesh:
    """Single equilateral triangle with unit edge length."""
    nodes = [
        Node(id=0, x=0.0, y=0.0),
        Node(id=1, x=1.0, y=0.0),
        Node(id=2, x=0.5, y=np.sqrt(3.0) / 2.0),
    ]
    elements = [Element(CellType.TRI3, nodes)]
    return Mesh("unit_triangle", nodes, elements, id_generator=id_generator)


@pytest.fixture
def two_hex_mesh(id_generator: MeshIdGenerator) -> Mesh:
    """Two unit hexahedra stacked in x direction, sharing one face."""
    nodes = []
    for z in (0.0, 1.0):
        for y in (0.0, 1.0):
            for x in (0.0, 1.0, 2.0):
                nodes.append(Node(id=len(nodes), x=x, y=y, z=z))

    def idx(i: int, j: int, k: int) -> int:
        return k * 6 + j * 3 + i

    elements = []
    for i in range(2):
        corners = [
            idx(i, 0, 0), idx(i + 1, 0, 0), idx(i + 1, 1, 0), idx(i, 1, 0),
            idx(i, 0, 1), idx(i + 1, 0, 1), idx(i + 1, 1, 1), idx(i, 1, 1),
        ]  # fmt: skip
        elements.append(Element(CellType.HEX8, [nodes[c] for c in corners]))
    return Mesh("two_hexes", nodes, elements, id_generator=id_generator)


@pytest.fixture
def tri6_mesh(id_generator: MeshIdGenerator) -> Mesh:
    """Single quadratic triangle, base nodes first."""
    nodes = [
        Node(id=0, x=0.0, y=0.0),
        Node(id=1, x=2.0, y=0.0),
        Node(id=2, x=0.0, y=2.0),
        Node(id=3, x=1.0, y=0.0),
        Node(id=4, x=1.0, y=1.0),
        Node(id=5, x=0.0, y=1.0),
    ]
    elements = [Element(CellType.TRI6, nodes)]
    return Mesh("tri6", nodes, elements, id_generator=id_generator)
