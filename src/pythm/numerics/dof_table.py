"""
Mapping of element-local degrees of freedom to global indices.

A :class:`LocalToGlobalIndexMap` numbers the unknowns of a mesh. Each
:class:`FieldComponent` contributes one unknown per supporting node:
order-1 components live on the base nodes, order-2 components on all
nodes. Global indices are numbered component by component.

Example
-------
>>> from pythm.sample_meshes import create_line_mesh
>>> from pythm.numerics.dof_table import FieldComponent, LocalToGlobalIndexMap
>>> mesh = create_line_mesh(n_elements=2)
>>> dofs = LocalToGlobalIndexMap(mesh, [FieldComponent("p"), FieldComponent("T")])
>>> dofs.n_dofs
6
>>> dofs.element_dofs(1).tolist()
[1, 2, 4, 5]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy import sparse

from pythm.core.elements import Element
from pythm.core.exceptions import ConfigurationError
from pythm.core.mesh import Mesh, get_base_nodes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldComponent:
    """
    One scalar unknown of a process variable.

    Parameters
    ----------
    name : str
        Component name, e.g. ``"pressure"`` or ``"displacement_x"``.
    order : int, default 1
        Interpolation order: 1 (base nodes) or 2 (all nodes).
    """

    name: str
    order: int = 1

    def __post_init__(self) -> None:
        if self.order not in (1, 2):
            raise ConfigurationError(
                f"Field component '{self.name}': unsupported order {self.order}"
            )


class LocalToGlobalIndexMap:
    """
    Degree-of-freedom table of a mesh.

    Parameters
    ----------
    mesh : Mesh
        The mesh. Element indices of the table are element IDs.
    components : sequence of FieldComponent
        The unknowns per node.
    """

    def __init__(self, mesh: Mesh, components: Sequence[FieldComponent]) -> None:
        if not components:
            raise ConfigurationError("A DOF table needs at least one field component")
        self._mesh = mesh
        self._components = tuple(components)

        base_ids = [node.id for node in get_base_nodes(mesh.elements)]
        base_index = np.full(mesh.n_nodes, -1, dtype=np.int64)
        base_index[base_ids] = np.arange(len(base_ids))
        all_index = np.arange(mesh.n_nodes, dtype=np.int64)

        # Global index of each node, per component.
        self._node_dofs: list[NDArray[np.int64]] = []
        offset = 0
        for component in self._components:
            if component.order == 1:
                index = np.where(base_index >= 0, base_index + offset, -1)
                offset += len(base_ids)
            else:
                index = all_index + offset
                offset += mesh.n_nodes
            self._node_dofs.append(index)
        self._n_dofs = offset

        self._element_dofs = [self._compute_element_dofs(e) for e in mesh.elements]
        logger.debug(
            "DOF table for mesh '%s': %d components, %d dofs",
            mesh.name,
            len(self._components),
            self._n_dofs,
        )

    def _compute_element_dofs(self, element: Element) -> NDArray[np.int64]:
        base_ids = np.array(element.base_node_ids, dtype=np.int64)
        all_ids = np.array(element.node_ids, dtype=np.int64)
        parts = [
            node_dofs[base_ids if component.order == 1 else all_ids]
            for component, node_dofs in zip(
                self._components, self._node_dofs, strict=True
            )
        ]
        return np.concatenate(parts)

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def components(self) -> tuple[FieldComponent, ...]:
        return self._components

    @property
    def n_components(self) -> int:
        return len(self._components)

    @property
    def n_dofs(self) -> int:
        """Return total number of global unknowns."""
        return self._n_dofs

    @property
    def n_elements(self) -> int:
        return len(self._element_dofs)

    def element_dofs(self, element_index: int) -> NDArray[np.int64]:
        """Return global indices of an element's unknowns, component-major."""
        return self._element_dofs[element_index]

    def get_number_of_element_dof(self, element_index: int) -> int:
        """Return number of unknowns of an element."""
        return len(self._element_dofs[element_index])

    def node_dof(self, node_id: int, component: int) -> int:
        """Return the global index of ``component`` at a node, or -1."""
        return int(self._node_dofs[component][node_id])

    def __repr__(self) -> str:
        names = [c.name for c in self._components]
        return f"LocalToGlobalIndexMap(components={names}, n_dofs={self._n_dofs})"


def compute_sparsity_pattern(dof_table: LocalToGlobalIndexMap) -> NDArray[np.int64]:
    """
    Count the non-zero entries per row of the global matrix.

    Every pair of unknowns of one element couples.

    Returns
    -------
    NDArray[np.int64]
        Number of non-zeros of each of the ``n_dofs`` rows.
    """
    rows = []
    cols = []
    for i in range(dof_table.n_elements):
        dofs = dof_table.element_dofs(i)
        rows.append(np.repeat(dofs, len(dofs)))
        cols.append(np.tile(dofs, len(dofs)))

    n = dof_table.n_dofs
    if not rows:
        return np.zeros(n, dtype=np.int64)
    row = np.concatenate(rows)
    col = np.concatenate(cols)
    pattern = sparse.coo_matrix(
        (np.ones(len(row), dtype=np.int32), (row, col)), shape=(n, n)
    ).tocsr()
    pattern.sum_duplicates()
    return pattern.getnnz(axis=1).astype(np.int64)
