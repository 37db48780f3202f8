"""Shape functions, quadrature rules and DOF tables."""

from __future__ import annotations

from pythm.numerics.dof_table import (
    FieldComponent,
    LocalToGlobalIndexMap,
    compute_sparsity_pattern,
)
from pythm.numerics.integration import IntegrationMethod, gauss_legendre
from pythm.numerics.shape_functions import (
    SHAPE_FUNCTIONS,
    ShapeFunction,
    linear_shape_function_for,
    lower_order,
    reference_node_coordinates,
    shape_function_for,
)

__all__ = [
    "ShapeFunction",
    "SHAPE_FUNCTIONS",
    "shape_function_for",
    "linear_shape_function_for",
    "lower_order",
    "reference_node_coordinates",
    "IntegrationMethod",
    "gauss_legendre",
    "FieldComponent",
    "LocalToGlobalIndexMap",
    "compute_sparsity_pattern",
]
