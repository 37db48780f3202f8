"""Core mesh data structures for pythm."""

from __future__ import annotations

from pythm.core.cell_types import (
    CELL_TYPE_SPECS,
    FAMILY_TOPOLOGY,
    CellType,
    CellTypeSpec,
    ElementFamily,
    FamilyTopology,
    cell_type_from_string,
    linear_cell_type,
    topology,
)
from pythm.core.elements import Element, Node
from pythm.core.exceptions import (
    ConfigurationError,
    MeshError,
    PropertyError,
    PyTHMError,
    ValidationError,
)
from pythm.core.mesh import (
    Mesh,
    MeshIdGenerator,
    add_property_to_mesh,
    calculate_nodes_connected_by_elements,
    create_mesh_from_element_selection,
    get_base_nodes,
    is_base_node,
    material_ids,
    scale_property_vector,
)
from pythm.core.mesh_editing import convert_to_linear_mesh, copy_node_vector
from pythm.core.partitioned_mesh import NodePartitionedMesh
from pythm.core.properties import MeshItemType, Properties, PropertyVector

__all__ = [
    # Cell types
    "CellType",
    "ElementFamily",
    "CellTypeSpec",
    "FamilyTopology",
    "CELL_TYPE_SPECS",
    "FAMILY_TOPOLOGY",
    "topology",
    "linear_cell_type",
    "cell_type_from_string",
    # Mesh entities
    "Node",
    "Element",
    "Mesh",
    "MeshIdGenerator",
    "NodePartitionedMesh",
    # Properties
    "MeshItemType",
    "Properties",
    "PropertyVector",
    # Mesh functions
    "add_property_to_mesh",
    "calculate_nodes_connected_by_elements",
    "create_mesh_from_element_selection",
    "get_base_nodes",
    "is_base_node",
    "material_ids",
    "scale_property_vector",
    "convert_to_linear_mesh",
    "copy_node_vector",
    # Exceptions
    "PyTHMError",
    "MeshError",
    "PropertyError",
    "ConfigurationError",
    "ValidationError",
]
