"""
Local assembler interface and common per-element data.

A local assembler ("kernel") computes the element contributions of one
process on one element. Kernels are created once per element at setup
time by :class:`~pythm.assembly.local_data_initializer.LocalDataInitializer`
and then called for every assembly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pythm.core.elements import Element
from pythm.core.exceptions import ConfigurationError
from pythm.numerics.integration import IntegrationMethod
from pythm.numerics.shape_functions import ShapeFunction


class LocalAssemblerInterface(ABC):
    """Abstract interface of all local assemblers.

    Every kernel must implement :meth:`assemble`.
    """

    @abstractmethod
    def assemble(
        self, t: float, dt: float, local_x: NDArray[np.float64]
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Assemble the element contributions.

        Parameters
        ----------
        t : float
            Current time.
        dt : float
            Time step size.
        local_x : NDArray[np.float64]
            Element-local solution vector, ordered like the element's DOFs.

        Returns
        -------
        tuple of NDArray
            Local matrix (``local_matrix_size`` squared) and local
            right-hand side vector.
        """
        ...


class LocalAssemblerData(LocalAssemblerInterface):
    """
    Base class of kernels holding element data at the integration points.

    Parameters
    ----------
    element : Element
        The element the kernel works on.
    local_matrix_size : int
        Number of element DOFs.
    shape_function : ShapeFunction
        Primary shape function.
    lower_order_shape_function : ShapeFunction
        Lower-order shape function, e.g. for the pressure of a Taylor-Hood
        pair. Equal to ``shape_function`` for linear interpolation.
    integration_method : IntegrationMethod
        Quadrature rule of the element family.
    global_dim : int
        Dimension of the space the mesh is embedded in.
    *extra
        Process specific constructor arguments, kept in :attr:`extra_args`.

    Attributes
    ----------
    shape_matrices : NDArray[np.float64]
        Values of ``shape_function`` at the integration points,
        shape (n_integration_points, shape_function.n_nodes).
    lower_order_shape_matrices : NDArray[np.float64]
        Values of ``lower_order_shape_function`` at the integration points.
    """

    def __init__(
        self,
        element: Element,
        local_matrix_size: int,
        shape_function: ShapeFunction,
        lower_order_shape_function: ShapeFunction,
        integration_method: IntegrationMethod,
        global_dim: int,
        *extra: Any,
    ) -> None:
        if shape_function.n_nodes > element.n_nodes:
            raise ConfigurationError(
                f"Shape function {shape_function.name} needs {shape_function.n_nodes} "
                f"nodes, element {element.id} ({element.cell_type}) has {element.n_nodes}"
            )
        self.element = element
        self.local_matrix_size = local_matrix_size
        self.shape_function = shape_function
        self.lower_order_shape_function = lower_order_shape_function
        self.integration_method = integration_method
        self.global_dim = global_dim
        self.extra_args = extra

        points = integration_method.points
        self.shape_matrices = shape_function.evaluate_at(points)
        self.lower_order_shape_matrices = lower_order_shape_function.evaluate_at(points)

    @property
    def n_integration_points(self) -> int:
        return self.integration_method.n_points

    @property
    def integration_weights(self) -> NDArray[np.float64]:
        """Return the reference-element quadrature weights."""
        return self.integration_method.weights

    def node_coordinates(self) -> NDArray[np.float64]:
        """Return coordinates of the nodes used by the primary shape function."""
        nodes = self.element.nodes[: self.shape_function.n_nodes]
        return np.array([(n.x, n.y, n.z) for n in nodes])[:, : self.global_dim]

    def integration_point_coordinates(self) -> NDArray[np.float64]:
        """Return physical coordinates of the integration points."""
        return self.shape_matrices @ self.node_coordinates()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(element={self.element.id}, "
            f"shape_function={self.shape_function.name}, "
            f"n_integration_points={self.n_integration_points})"
        )
