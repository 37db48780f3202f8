"""Mesh editing operations producing new meshes."""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from pythm.core.cell_types import CellType, linear_cell_type
from pythm.core.elements import Element, Node
from pythm.core.exceptions import ConfigurationError
from pythm.core.mesh import Mesh, get_base_nodes
from pythm.core.properties import MeshItemType

logger = logging.getLogger(__name__)

_CONVERTIBLE_CELL_TYPES = frozenset(
    {
        CellType.LINE3,
        CellType.TRI6,
        CellType.QUAD8,
        CellType.QUAD9,
        CellType.TET10,
        CellType.HEX20,
        CellType.PRISM15,
        CellType.PYRAMID13,
    }
)


def copy_node_vector(nodes: Iterable[Node]) -> list[Node]:
    """Return clones of ``nodes`` (same id and coordinates, no incidence)."""
    return [node.copy() for node in nodes]


def convert_to_linear_mesh(mesh: Mesh, new_mesh_name: str) -> Mesh:
    """
    Create a linear mesh from a quadratic one.

    Every quadratic element is replaced by the linear element of the same
    family spanned by its base nodes; linear elements are kept. The new
    mesh only contains the base nodes of ``mesh``.

    Cell and other non-node properties are copied as they are. Floating
    point node properties are copied for the retained base nodes; other
    node properties are dropped.

    Parameters
    ----------
    mesh : Mesh
        Source mesh. It is not modified.
    new_mesh_name : str
        Name of the new mesh.

    Returns
    -------
    Mesh
        The linear mesh.

    Raises
    ------
    ConfigurationError
        If ``mesh`` contains an element type that cannot be converted.
    """
    source_base_nodes = get_base_nodes(mesh.elements)
    new_nodes = copy_node_vector(source_base_nodes)
    node_by_source_id = {node.id: node for node in new_nodes}

    new_elements: list[Element] = []
    for element in mesh.elements:
        if element.is_linear:
            cell_type = element.cell_type
        elif element.cell_type in _CONVERTIBLE_CELL_TYPES:
            cell_type = linear_cell_type(element.cell_type)
        else:
            raise ConfigurationError(
                f"Mesh element type {element.cell_type} is not supported"
            )
        new_elements.append(
            Element(cell_type, [node_by_source_id[n.id] for n in element.base_nodes])
        )

    properties = mesh.properties.exclude_copy_properties(
        item_types=[MeshItemType.NODE]
    )
    new_mesh = Mesh(new_mesh_name, new_nodes, new_elements, properties)

    source_ids = np.array([node.id for node in source_base_nodes], dtype=np.int64)
    for name, pv in mesh.properties:
        if pv.mesh_item_type != MeshItemType.NODE:
            continue
        if not np.issubdtype(pv.dtype, np.floating):
            logger.debug("Skipping non-floating node property '%s'.", name)
            continue
        new_pv = new_mesh.properties.create_new_property_vector(
            name,
            MeshItemType.NODE,
            pv.n_components,
            dtype=pv.dtype,
            n_items=new_mesh.n_nodes,
        )
        new_pv.as_matrix()[:] = pv.as_matrix()[source_ids]

    return new_mesh
