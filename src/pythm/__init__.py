"""
pythm - Finite element mesh and local assembly core for coupled
thermo-hydro-mechanical (THM) process simulation.

This package provides:
- Unstructured meshes of mixed element types with derived topology
- Node-partitioned subdomain meshes for domain decomposition
- Shape functions, quadrature rules and DOF tables
- Dispatch of element types to per-element process kernels
"""

from __future__ import annotations

__version__ = "0.1.0"

from pythm.assembly import (
    EnabledElements,
    LocalAssemblerData,
    LocalAssemblerInterface,
    LocalDataInitializer,
    create_local_assemblers,
)
from pythm.core.cell_types import CellType, ElementFamily
from pythm.core.elements import Element, Node
from pythm.core.exceptions import (
    ConfigurationError,
    MeshError,
    PropertyError,
    PyTHMError,
    ValidationError,
)
from pythm.core.mesh import Mesh, MeshIdGenerator, create_mesh_from_element_selection
from pythm.core.partitioned_mesh import NodePartitionedMesh
from pythm.core.properties import MeshItemType, Properties, PropertyVector
from pythm.numerics import (
    FieldComponent,
    IntegrationMethod,
    LocalToGlobalIndexMap,
    ShapeFunction,
    gauss_legendre,
    shape_function_for,
)
from pythm.sample_meshes import (
    create_cuboid_mesh,
    create_line_mesh,
    create_rectangular_mesh,
)

__all__ = [
    "__version__",
    # Core mesh classes
    "CellType",
    "ElementFamily",
    "Node",
    "Element",
    "Mesh",
    "MeshIdGenerator",
    "NodePartitionedMesh",
    "create_mesh_from_element_selection",
    # Properties
    "MeshItemType",
    "Properties",
    "PropertyVector",
    # Numerics
    "ShapeFunction",
    "shape_function_for",
    "IntegrationMethod",
    "gauss_legendre",
    "FieldComponent",
    "LocalToGlobalIndexMap",
    # Assembly
    "EnabledElements",
    "LocalAssemblerInterface",
    "LocalAssemblerData",
    "LocalDataInitializer",
    "create_local_assemblers",
    # Sample meshes
    "create_line_mesh",
    "create_rectangular_mesh",
    "create_cuboid_mesh",
    # Exceptions
    "PyTHMError",
    "MeshError",
    "PropertyError",
    "ConfigurationError",
    "ValidationError",
]
