"""
Lagrange shape functions on the reference elements.

One :class:`ShapeFunction` exists per :class:`~pythm.core.cell_types.CellType`.
Reference coordinates are:

- line: ``xi`` in [-1, 1]
- triangle / tetrahedron: area / volume coordinates, ``r, s (, t) >= 0``
  with ``r + s (+ t) <= 1``
- quadrilateral / hexahedron: ``xi, eta (, zeta)`` in [-1, 1]
- prism: triangle coordinates ``r, s`` times ``zeta`` in [-1, 1]
- pyramid: base ``xi, eta`` in [-1, 1] at ``zeta = 0``, apex at ``zeta = 1``

Higher-order nodes sit at edge midpoints (and the face center of a
``QUAD9``), in the node order of the cell type.

Example
-------
>>> from pythm.core.cell_types import CellType
>>> from pythm.numerics.shape_functions import shape_function_for
>>> sf = shape_function_for(CellType.QUAD4)
>>> sf.name
'ShapeQuad4'
>>> sf.evaluate([0.0, 0.0])
array([0.25, 0.25, 0.25, 0.25])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pythm.core.cell_types import (
    CELL_TYPE_SPECS,
    CellType,
    ElementFamily,
    linear_cell_type,
    topology,
)

# Lower bound for (1 - zeta) in the pyramid functions, which are rational
# and singular at the apex.
_PYRAMID_APEX_EPS = 1.0e-12

_Evaluator = Callable[[NDArray[np.float64]], NDArray[np.float64]]


def reference_node_coordinates(cell_type: CellType) -> NDArray[np.float64]:
    """
    Return natural coordinates of all nodes of a cell type.

    Returns
    -------
    NDArray[np.float64]
        Array of shape (n_nodes, dim).
    """
    spec = CELL_TYPE_SPECS[cell_type]
    topo = topology(cell_type)
    base = np.array(topo.reference_nodes, dtype=np.float64).reshape(
        topo.n_base_nodes, topo.dimension
    )
    rows = [base]
    if spec.mid_edges:
        rows.append(np.array([(base[a] + base[b]) / 2.0 for a, b in spec.mid_edges]))
    if spec.has_center_node:
        rows.append(base.mean(axis=0, keepdims=True))
    return np.vstack(rows)


def _barycentric(xi: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.concatenate(([1.0 - xi.sum()], xi))


# ----------------------------------------------------------------------
# Evaluator factories. Each takes the reference node coordinates (n, dim)
# and the cell type and returns ``xi -> N(xi)``.
# ----------------------------------------------------------------------


def _point(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    return lambda xi: np.ones(1)


def _tensor_linear(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        return np.prod((1.0 + ref * xi) / 2.0, axis=1)

    return evaluate


def _tensor_quadratic(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    """Products of 1D quadratic Lagrange polynomials (LINE3, QUAD9)."""

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        factors = np.where(ref == 0.0, 1.0 - xi**2, 0.5 * xi * (xi + ref))
        return np.prod(factors, axis=1)

    return evaluate


def _serendipity(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    """Quadratic serendipity functions (QUAD8, HEX20)."""
    dim = ref.shape[1]
    is_corner = np.all(ref != 0.0, axis=1)

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        linear = (1.0 + ref * xi) / 2.0
        corner = np.prod(linear, axis=1) * ((ref * xi).sum(axis=1) - (dim - 1))
        mid = np.prod(np.where(ref == 0.0, 1.0 - xi**2, linear), axis=1)
        return np.where(is_corner, corner, mid)

    return evaluate


def _simplex_linear(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    return _barycentric


def _simplex_quadratic(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    mid_edges = CELL_TYPE_SPECS[cell_type].mid_edges

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        lam = _barycentric(xi)
        corners = lam * (2.0 * lam - 1.0)
        mids = [4.0 * lam[a] * lam[b] for a, b in mid_edges]
        return np.concatenate((corners, mids))

    return evaluate


def _prism_linear(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    levels = ref[:, 2]

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        lam = np.tile(_barycentric(xi[:2]), 2)
        return lam * (1.0 + xi[2] * levels) / 2.0

    return evaluate


def _prism_quadratic(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    mid_edges = CELL_TYPE_SPECS[cell_type].mid_edges
    corner_levels = ref[:6, 2]

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        lam = _barycentric(xi[:2])
        zeta = xi[2]
        bubble = 1.0 - zeta**2
        lam6 = np.tile(lam, 2)
        corners = 0.5 * lam6 * (2.0 * lam6 - 1.0) * (1.0 + zeta * corner_levels)
        corners -= 0.5 * lam6 * bubble
        mids = []
        for a, b in mid_edges:
            if a // 3 == b // 3:
                level = -1.0 if a < 3 else 1.0
                mids.append(2.0 * lam[a % 3] * lam[b % 3] * (1.0 + zeta * level))
            else:
                mids.append(lam[a % 3] * bubble)
        return np.concatenate((corners, mids))

    return evaluate


def _pyramid_linear(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    base = ref[:4, :2]

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        r = max(1.0 - xi[2], _PYRAMID_APEX_EPS)
        corners = 0.25 * (r + base[:, 0] * xi[0]) * (r + base[:, 1] * xi[1]) / r
        return np.append(corners, xi[2])

    return evaluate


def _pyramid_quadratic(ref: NDArray[np.float64], cell_type: CellType) -> _Evaluator:
    mid_edges = CELL_TYPE_SPECS[cell_type].mid_edges
    base = ref[:4, :2]

    def evaluate(xi: NDArray[np.float64]) -> NDArray[np.float64]:
        zeta = xi[2]
        r = max(1.0 - zeta, _PYRAMID_APEX_EPS)
        # Base coordinates collapsed onto the square [-1, 1]^2 at height zeta.
        s = np.clip(xi[:2] / r, -1.0, 1.0)
        base_scale = r * (1.0 - 2.0 * zeta)
        lateral_scale = 4.0 * zeta * (1.0 - zeta)

        sx = base[:, 0] * s[0]
        sy = base[:, 1] * s[1]
        bilinear = 0.25 * (1.0 + sx) * (1.0 + sy)

        values = list(bilinear * (sx + sy - 1.0) * base_scale)
        values.append(zeta * (2.0 * zeta - 1.0))
        for a, b in mid_edges:
            if b == 4:
                values.append(bilinear[a] * lateral_scale)
                continue
            mid = (base[a] + base[b]) / 2.0
            factors = np.where(mid == 0.0, 1.0 - s**2, (1.0 + mid * s) / 2.0)
            values.append(np.prod(factors) * base_scale)
        return np.array(values)

    return evaluate


_FACTORIES: dict[tuple[ElementFamily, int], Callable[..., _Evaluator]] = {
    (ElementFamily.POINT, 1): _point,
    (ElementFamily.LINE, 1): _tensor_linear,
    (ElementFamily.LINE, 2): _tensor_quadratic,
    (ElementFamily.QUAD, 1): _tensor_linear,
    (ElementFamily.HEX, 1): _tensor_linear,
    (ElementFamily.TRI, 1): _simplex_linear,
    (ElementFamily.TRI, 2): _simplex_quadratic,
    (ElementFamily.TET, 1): _simplex_linear,
    (ElementFamily.TET, 2): _simplex_quadratic,
    (ElementFamily.PRISM, 1): _prism_linear,
    (ElementFamily.PRISM, 2): _prism_quadratic,
    (ElementFamily.PYRAMID, 1): _pyramid_linear,
    (ElementFamily.PYRAMID, 2): _pyramid_quadratic,
}

_CELL_TYPE_FACTORIES: dict[CellType, Callable[..., _Evaluator]] = {
    CellType.QUAD8: _serendipity,
    CellType.QUAD9: _tensor_quadratic,
    CellType.HEX20: _serendipity,
}


@dataclass(frozen=True)
class ShapeFunction:
    """
    Nodal shape functions of one cell type.

    Attributes
    ----------
    name : str
        Shape function name, e.g. ``"ShapeTri3"``.
    cell_type : CellType
        Cell type the functions belong to.
    dim : int
        Dimension of the reference element.
    order : int
        Polynomial order (1 or 2).
    reference_nodes : tuple of tuple of float
        Natural coordinates of the nodes.
    """

    name: str
    cell_type: CellType
    dim: int
    order: int
    reference_nodes: tuple[tuple[float, ...], ...]
    _evaluate: _Evaluator = field(repr=False, compare=False)

    @property
    def n_nodes(self) -> int:
        """Return number of shape functions (element nodes)."""
        return len(self.reference_nodes)

    def evaluate(self, xi: ArrayLike) -> NDArray[np.float64]:
        """
        Evaluate all shape functions at one reference point.

        Parameters
        ----------
        xi : array_like
            Natural coordinates, length ``dim``.

        Returns
        -------
        NDArray[np.float64]
            Values of the ``n_nodes`` shape functions.
        """
        point = np.asarray(xi, dtype=np.float64).reshape(self.dim)
        return self._evaluate(point)

    def evaluate_at(self, points: ArrayLike) -> NDArray[np.float64]:
        """Evaluate at several points; returns an (n_points, n_nodes) array."""
        pts = np.asarray(points, dtype=np.float64)
        pts = pts.reshape(len(pts), self.dim)
        return np.array([self._evaluate(p) for p in pts]).reshape(len(pts), self.n_nodes)


def _make_shape_function(cell_type: CellType) -> ShapeFunction:
    spec = CELL_TYPE_SPECS[cell_type]
    ref = reference_node_coordinates(cell_type)
    factory = _CELL_TYPE_FACTORIES.get(cell_type) or _FACTORIES[(spec.family, spec.order)]
    return ShapeFunction(
        name=f"Shape{cell_type.name.capitalize()}",
        cell_type=cell_type,
        dim=topology(cell_type).dimension,
        order=spec.order,
        reference_nodes=tuple(tuple(float(c) for c in row) for row in ref),
        _evaluate=factory(ref, cell_type),
    )


SHAPE_FUNCTIONS: dict[CellType, ShapeFunction] = {
    cell_type: _make_shape_function(cell_type) for cell_type in CellType
}


def shape_function_for(cell_type: CellType) -> ShapeFunction:
    """Return the native shape function of a cell type."""
    return SHAPE_FUNCTIONS[cell_type]


def linear_shape_function_for(cell_type: CellType) -> ShapeFunction:
    """Return the linear shape function of a cell type's family."""
    return SHAPE_FUNCTIONS[linear_cell_type(cell_type)]


def lower_order(shape_function: ShapeFunction) -> ShapeFunction:
    """
    Return the lower-order counterpart of a shape function.

    Linear shape functions are their own lower-order counterpart.

    Examples
    --------
    >>> from pythm.core.cell_types import CellType
    >>> lower_order(shape_function_for(CellType.HEX20)).name
    'ShapeHex8'
    """
    return linear_shape_function_for(shape_function.cell_type)
