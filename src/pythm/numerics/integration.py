"""
Gauss-Legendre quadrature rules on the reference elements.

For lines, quadrilaterals and hexahedra ``integration_order`` is the number
of Gauss points per direction. Triangles and tetrahedra use tabulated
rules of polynomial degree ``integration_order``. Prisms combine a
triangle rule with a line rule, pyramids use a collapsed (Duffy) tensor
rule.

Weights integrate over the reference elements of
:mod:`pythm.numerics.shape_functions`, so they sum to the reference
volume: 2 (line), 4 (quad), 8 (hex), 1/2 (triangle), 1/6 (tet),
1 (prism), 4/3 (pyramid). The one-point pyramid rule is the exception and
underestimates the pyramid volume.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.typing import NDArray

from pythm.core.cell_types import ElementFamily
from pythm.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MAX_TENSOR_ORDER = 4
MAX_SIMPLEX_ORDER = 3


@dataclass(frozen=True, eq=False)
class IntegrationMethod:
    """
    Quadrature points and weights on one reference element.

    Attributes
    ----------
    family : ElementFamily
        Element family the rule applies to.
    integration_order : int
        Order the rule was created with.
    points : NDArray[np.float64]
        Natural coordinates of the points, shape (n_points, dim).
    weights : NDArray[np.float64]
        Quadrature weights, shape (n_points,).
    """

    family: ElementFamily
    integration_order: int
    points: NDArray[np.float64]
    weights: NDArray[np.float64]

    @property
    def n_points(self) -> int:
        """Return number of integration points."""
        return len(self.weights)

    def __repr__(self) -> str:
        return (
            f"IntegrationMethod(family={self.family.name}, "
            f"order={self.integration_order}, n_points={self.n_points})"
        )


def _tensor_rule(order: int, dim: int) -> tuple[NDArray, NDArray]:
    x, w = np.polynomial.legendre.leggauss(order)
    points = np.array(list(itertools.product(x, repeat=dim)))
    weights = np.array([np.prod(c) for c in itertools.product(w, repeat=dim)])
    return points, weights


def _triangle_rule(order: int) -> tuple[NDArray, NDArray]:
    if order == 1:
        return np.array([[1 / 3, 1 / 3]]), np.array([0.5])
    if order == 2:
        points = np.array([[1 / 6, 1 / 6], [2 / 3, 1 / 6], [1 / 6, 2 / 3]])
        return points, np.full(3, 1 / 6)
    points = np.array([[1 / 3, 1 / 3], [0.2, 0.2], [0.6, 0.2], [0.2, 0.6]])
    return points, np.array([-27 / 96, 25 / 96, 25 / 96, 25 / 96])


def _tetrahedron_rule(order: int) -> tuple[NDArray, NDArray]:
    if order == 1:
        return np.array([[0.25, 0.25, 0.25]]), np.array([1 / 6])
    if order == 2:
        a, b = 0.1381966011250105, 0.5854101966249685
        points = np.array([[a, a, a], [b, a, a], [a, b, a], [a, a, b]])
        return points, np.full(4, 1 / 24)
    a, b = 1 / 6, 0.5
    points = np.array(
        [[0.25, 0.25, 0.25], [a, a, a], [b, a, a], [a, b, a], [a, a, b]]
    )
    return points, np.array([-2 / 15, 3 / 40, 3 / 40, 3 / 40, 3 / 40])


def _prism_rule(order: int) -> tuple[NDArray, NDArray]:
    tri_points, tri_weights = _triangle_rule(order)
    z, wz = np.polynomial.legendre.leggauss(order)
    points = np.array([[p[0], p[1], zk] for zk in z for p in tri_points])
    weights = np.array([wt * wk for wk in wz for wt in tri_weights])
    return points, weights


def _pyramid_rule(order: int) -> tuple[NDArray, NDArray]:
    x, w = np.polynomial.legendre.leggauss(order)
    points = []
    weights = []
    for tk, wk in zip(x, w, strict=True):
        zeta = (1.0 + tk) / 2.0
        scale = 1.0 - zeta
        for xj, wj in zip(x, w, strict=True):
            for xi, wi in zip(x, w, strict=True):
                points.append((xi * scale, xj * scale, zeta))
                weights.append(wi * wj * wk * scale**2 * 0.5)
    return np.array(points), np.array(weights)


def _max_order(family: ElementFamily) -> int:
    if family in (
        ElementFamily.TRI,
        ElementFamily.TET,
        ElementFamily.PRISM,
        ElementFamily.PYRAMID,
    ):
        return MAX_SIMPLEX_ORDER
    return MAX_TENSOR_ORDER


@lru_cache(maxsize=None)
def gauss_legendre(family: ElementFamily, order: int = 2) -> IntegrationMethod:
    """
    Return the Gauss-Legendre rule of ``order`` for an element family.

    Parameters
    ----------
    family : ElementFamily
        Element family.
    order : int, default 2
        Integration order.

    Returns
    -------
    IntegrationMethod
        The quadrature rule. Rules are cached and must not be modified.

    Raises
    ------
    ConfigurationError
        If ``order`` is not supported for ``family``.

    Examples
    --------
    >>> from pythm.core.cell_types import ElementFamily
    >>> gauss_legendre(ElementFamily.QUAD, 2).n_points
    4
    >>> float(gauss_legendre(ElementFamily.TRI, 1).weights.sum())
    0.5
    """
    if not 1 <= order <= _max_order(family):
        raise ConfigurationError(
            f"Integration order {order} is not supported for {family.name} "
            f"elements (supported: 1 to {_max_order(family)})"
        )

    if family == ElementFamily.POINT:
        points, weights = np.zeros((1, 0)), np.ones(1)
    elif family == ElementFamily.LINE:
        points, weights = _tensor_rule(order, 1)
    elif family == ElementFamily.QUAD:
        points, weights = _tensor_rule(order, 2)
    elif family == ElementFamily.HEX:
        points, weights = _tensor_rule(order, 3)
    elif family == ElementFamily.TRI:
        points, weights = _triangle_rule(order)
    elif family == ElementFamily.TET:
        points, weights = _tetrahedron_rule(order)
    elif family == ElementFamily.PRISM:
        points, weights = _prism_rule(order)
    else:
        points, weights = _pyramid_rule(order)

    logger.debug(
        "Created %d-point Gauss-Legendre rule of order %d for %s",
        len(weights),
        order,
        family.name,
    )
    points.setflags(write=False)
    weights.setflags(write=False)
    return IntegrationMethod(family, order, points, weights)
