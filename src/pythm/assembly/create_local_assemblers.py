"""Creation of one local assembler per mesh element."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, TypeVar

from pythm.assembly.config import EnabledElements
from pythm.assembly.local_assembler import LocalAssemblerData
from pythm.assembly.local_data_initializer import LocalDataInitializer
from pythm.core.elements import Element
from pythm.core.exceptions import ConfigurationError
from pythm.numerics.dof_table import LocalToGlobalIndexMap

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def transform_dereferenced(
    f: Callable[..., R], items: Sequence[T], *args: Any
) -> list[R]:
    """Apply ``f(index, item, *args)`` to every item, serially and in order."""
    return [f(i, item, *args) for i, item in enumerate(items)]


def create_local_assemblers(
    dimension: int,
    elements: Sequence[Element],
    dof_table: LocalToGlobalIndexMap,
    assembler_type: type[LocalAssemblerData],
    *extra: Any,
    shape_function_order: int | None = None,
    enabled: EnabledElements | None = None,
    integration_order: int = 2,
) -> list[LocalAssemblerData]:
    """
    Create a local assembler for each element.

    Parameters
    ----------
    dimension : int
        Global dimension of the problem (1, 2 or 3).
    elements : sequence of Element
        Elements to create kernels for. The position of an element in this
        sequence is its index into ``dof_table``.
    dof_table : LocalToGlobalIndexMap
        DOF table of the mesh.
    assembler_type : type
        Kernel class.
    *extra
        Additional constructor arguments passed to every kernel.
    shape_function_order : int or None, optional
        Shape function selection, see
        :class:`~pythm.assembly.local_data_initializer.LocalDataInitializer`.
    enabled : EnabledElements, optional
        Enabled cell types.
    integration_order : int, default 2
        Gauss-Legendre integration order.

    Returns
    -------
    list of LocalAssemblerData
        One kernel per element, in element order.

    Raises
    ------
    ConfigurationError
        If ``dimension`` is not 1, 2 or 3, or a kernel cannot be built for
        one of the elements.
    """
    logger.debug("Create local assemblers.")
    if dimension not in (1, 2, 3):
        raise ConfigurationError(
            f"Meshes of dimension {dimension} are not supported; "
            f"the dimension must be 1, 2 or 3."
        )

    initializer = LocalDataInitializer(
        assembler_type,
        dimension,
        dof_table,
        shape_function_order,
        enabled=enabled,
        integration_order=integration_order,
    )

    logger.debug("Calling local assembler builder for all mesh elements.")
    return transform_dereferenced(initializer, elements, *extra)
