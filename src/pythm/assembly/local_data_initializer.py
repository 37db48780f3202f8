"""
Dispatch from element cell types to local assembler constructors.

:class:`LocalDataInitializer` builds, once at setup time, a registry that
maps each enabled :class:`~pythm.core.cell_types.CellType` to a builder.
A builder creates one kernel of the configured assembler type, bound to the
shape function pair and the quadrature rule of that cell type.

Shape function selection by ``shape_function_order``:

``None``
    Every cell type uses its own shape function, paired with itself.
``1``
    Every cell type uses the linear shape function of its family, paired
    with itself. Quadratic elements are interpolated on their corners.
``2``
    Only quadratic cell types are registered. Each uses its quadratic shape
    function paired with the linear one of the same family.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pythm.assembly.config import EnabledElements
from pythm.assembly.local_assembler import LocalAssemblerData
from pythm.core.cell_types import CELL_TYPE_SPECS, CellType
from pythm.core.elements import Element
from pythm.core.exceptions import ConfigurationError
from pythm.numerics.dof_table import LocalToGlobalIndexMap
from pythm.numerics.integration import gauss_legendre
from pythm.numerics.shape_functions import (
    ShapeFunction,
    linear_shape_function_for,
    lower_order,
    shape_function_for,
)

logger = logging.getLogger(__name__)

SUPPORTED_SHAPE_FUNCTION_ORDERS = (1, 2)

LocalAssemblerBuilder = Callable[..., LocalAssemblerData]


def _shape_function_pair(
    cell_type: CellType, shape_function_order: int | None
) -> tuple[ShapeFunction, ShapeFunction] | None:
    """Select (shape function, lower-order shape function) for a cell type."""
    if shape_function_order is None:
        native = shape_function_for(cell_type)
        return native, native
    if shape_function_order == 1:
        linear = linear_shape_function_for(cell_type)
        return linear, linear
    native = shape_function_for(cell_type)
    if native.order != 2:
        return None
    return native, lower_order(native)


class LocalDataInitializer:
    """
    Registry of local assembler builders keyed by cell type.

    Parameters
    ----------
    assembler_type : type
        Kernel class, a subclass of
        :class:`~pythm.assembly.local_assembler.LocalAssemblerData`.
    global_dim : int
        Dimension of the space the mesh is embedded in. Cell types of a
        higher dimension are not registered.
    dof_table : LocalToGlobalIndexMap
        Provides the number of DOFs of each element.
    shape_function_order : int or None, optional
        Shape function selection, see module docstring.
    enabled : EnabledElements, optional
        Enabled cell types. All supported cell types by default.
    integration_order : int, default 2
        Gauss-Legendre integration order.

    Raises
    ------
    ConfigurationError
        If ``shape_function_order`` is not supported.
    """

    def __init__(
        self,
        assembler_type: type[LocalAssemblerData],
        global_dim: int,
        dof_table: LocalToGlobalIndexMap,
        shape_function_order: int | None = None,
        *,
        enabled: EnabledElements | None = None,
        integration_order: int = 2,
    ) -> None:
        if (
            shape_function_order is not None
            and shape_function_order not in SUPPORTED_SHAPE_FUNCTION_ORDERS
        ):
            raise ConfigurationError(
                f"The given shape function order {shape_function_order} is not "
                f"supported. Only shape functions of order 1 or 2 are supported."
            )
        self._assembler_type = assembler_type
        self._global_dim = global_dim
        self._dof_table = dof_table
        self._shape_function_order = shape_function_order
        self._enabled = enabled if enabled is not None else EnabledElements()
        self._builders: dict[CellType, LocalAssemblerBuilder] = {}

        for cell_type in self._enabled.enabled_cell_types():
            pair = _shape_function_pair(cell_type, shape_function_order)
            if pair is None:
                continue
            shape_function, lower_order_shape_function = pair
            # Points are never assembled.
            if shape_function.dim < 1 or shape_function.dim > global_dim:
                continue
            self._builders[cell_type] = self._make_builder(
                shape_function, lower_order_shape_function, integration_order
            )

        logger.debug(
            "Registered local assembler builders for %d cell types: %s",
            len(self._builders),
            ", ".join(str(cell_type) for cell_type in self._builders),
        )

    def _make_builder(
        self,
        shape_function: ShapeFunction,
        lower_order_shape_function: ShapeFunction,
        integration_order: int,
    ) -> LocalAssemblerBuilder:
        assembler_type = self._assembler_type
        global_dim = self._global_dim
        family = CELL_TYPE_SPECS[shape_function.cell_type].family

        def build(
            element: Element, local_matrix_size: int, *extra: Any
        ) -> LocalAssemblerData:
            integration_method = gauss_legendre(family, integration_order)
            return assembler_type(
                element,
                local_matrix_size,
                shape_function,
                lower_order_shape_function,
                integration_method,
                global_dim,
                *extra,
            )

        return build

    @property
    def global_dim(self) -> int:
        return self._global_dim

    @property
    def shape_function_order(self) -> int | None:
        return self._shape_function_order

    @property
    def registered_cell_types(self) -> list[CellType]:
        """Return the cell types kernels can be built for."""
        return list(self._builders)

    def __contains__(self, cell_type: object) -> bool:
        return cell_type in self._builders

    def __call__(
        self, local_index: int, element: Element, *extra: Any
    ) -> LocalAssemblerData:
        """
        Create the kernel for one element.

        Parameters
        ----------
        local_index : int
            Position of the element in the DOF table. This is not
            necessarily the element's ID.
        element : Element
            The element.
        *extra
            Process specific constructor arguments.

        Raises
        ------
        ConfigurationError
            If no builder is registered for the element's cell type, or the
            integration order is not supported for its element family.
        """
        builder = self._builders.get(element.cell_type)
        if builder is None:
            raise ConfigurationError(
                f"No local assembler can be built for mesh element type "
                f"{element.cell_type} (element {element.id}). Either this element "
                f"type is disabled in the element configuration, or the element "
                f"order does not match the requested shape function order."
            )
        local_matrix_size = self._dof_table.get_number_of_element_dof(local_index)
        return builder(element, local_matrix_size, *extra)

    def __repr__(self) -> str:
        return (
            f"LocalDataInitializer(assembler_type={self._assembler_type.__name__}, "
            f"global_dim={self._global_dim}, "
            f"shape_function_order={self._shape_function_order}, "
            f"n_cell_types={len(self._builders)})"
        )
