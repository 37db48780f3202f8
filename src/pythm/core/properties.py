"""
Named property arrays attached to a mesh.

A :class:`PropertyVector` is a flat, typed numpy array with a fixed number of
components per mesh item (node, cell, ...). :class:`Properties` is the
name-indexed container owned by each :class:`~pythm.core.mesh.Mesh`.

Lookups are type-checked: asking for a property that does not exist gives
``None``, asking for an existing property with the wrong value type, item
type or component count raises :class:`~pythm.core.exceptions.PropertyError`.

Example
-------
>>> import numpy as np
>>> from pythm.core.properties import MeshItemType, Properties
>>> props = Properties()
>>> pv = props.create_new_property_vector("MaterialIDs", MeshItemType.CELL, dtype=int, n_items=3)
>>> pv[:] = [0, 1, 1]
>>> props.exists("MaterialIDs", MeshItemType.CELL, 1, int)
True
>>> props.get("pressure") is None
True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator

import numpy as np
from numpy.typing import NDArray

from pythm.core.exceptions import MeshError, PropertyError

logger = logging.getLogger(__name__)


class MeshItemType(Enum):
    """Kind of mesh entity a property is defined on."""

    NODE = "node"
    EDGE = "edge"
    FACE = "face"
    CELL = "cell"
    INTEGRATION_POINT = "integration_point"


_GENERIC_DTYPES: dict[type, Any] = {
    int: np.integer,
    float: np.floating,
    bool: np.bool_,
}


def _dtype_matches(actual: np.dtype, requested: Any) -> bool:
    """Check a numpy dtype against a requested value type."""
    generic = _GENERIC_DTYPES.get(requested)
    if generic is not None:
        return bool(np.issubdtype(actual, generic))
    return actual == np.dtype(requested)


def _dtype_name(requested: Any) -> str:
    return getattr(requested, "__name__", str(requested))


@dataclass(eq=False)
class PropertyVector:
    """
    A named, typed array of per-item values.

    Parameters
    ----------
    name : str
        Property name, unique within a :class:`Properties` container.
    mesh_item_type : MeshItemType
        Kind of mesh item the values belong to.
    n_components : int
        Number of values per item (stride).
    data : NDArray
        Flat value array of length ``n_items * n_components``.

    Raises
    ------
    MeshError
        If the data length is not a multiple of ``n_components``.
    """

    name: str
    mesh_item_type: MeshItemType
    n_components: int
    data: NDArray

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data).reshape(-1)
        if self.n_components < 1:
            raise MeshError(
                f"Property '{self.name}': number of components must be positive, "
                f"got {self.n_components}"
            )
        if self.data.size % self.n_components != 0:
            raise MeshError(
                f"Property '{self.name}': {self.data.size} values cannot be split "
                f"into {self.n_components} components per item"
            )

    @property
    def n_items(self) -> int:
        """Return number of mesh items covered by this property."""
        return self.data.size // self.n_components

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    def as_matrix(self) -> NDArray:
        """Return an (n_items, n_components) view of the data."""
        return self.data.reshape(self.n_items, self.n_components)

    def get_component(self, item: int, component: int) -> Any:
        """Return value of ``component`` for mesh item ``item``."""
        return self.data[item * self.n_components + component]

    def resize(self, n_items: int) -> None:
        """Resize to ``n_items`` items; new entries are zero."""
        new_data = np.zeros(n_items * self.n_components, dtype=self.data.dtype)
        n_keep = min(new_data.size, self.data.size)
        new_data[:n_keep] = self.data[:n_keep]
        self.data = new_data

    def copy(self) -> PropertyVector:
        """Return a deep copy."""
        return PropertyVector(
            self.name, self.mesh_item_type, self.n_components, self.data.copy()
        )

    def __len__(self) -> int:
        return self.data.size

    def __getitem__(self, index: Any) -> Any:
        return self.data[index]

    def __setitem__(self, index: Any, value: Any) -> None:
        self.data[index] = value

    def __iter__(self) -> Iterator[Any]:
        return iter(self.data)

    def __repr__(self) -> str:
        return (
            f"PropertyVector(name='{self.name}', item_type={self.mesh_item_type.name}, "
            f"n_components={self.n_components}, n_items={self.n_items}, "
            f"dtype={self.data.dtype})"
        )


class Properties:
    """
    Container of property vectors indexed by name.

    Examples
    --------
    >>> props = Properties()
    >>> pv = props.create_new_property_vector("temperature", MeshItemType.NODE, n_items=4)
    >>> "temperature" in props
    True
    >>> len(props)
    1
    """

    def __init__(self) -> None:
        self._properties: dict[str, PropertyVector] = {}

    def create_new_property_vector(
        self,
        name: str,
        mesh_item_type: MeshItemType,
        n_components: int = 1,
        dtype: Any = float,
        n_items: int = 0,
    ) -> PropertyVector | None:
        """
        Create and register a zero-initialized property vector.

        Returns
        -------
        PropertyVector or None
            The new vector, or None if a property named ``name`` already
            exists (the existing vector is left untouched).
        """
        if name in self._properties:
            logger.error("A property of the name '%s' is already assigned to the mesh.", name)
            return None
        pv = PropertyVector(
            name, mesh_item_type, n_components, np.zeros(n_items * n_components, dtype=dtype)
        )
        self._properties[name] = pv
        return pv

    def add_property_vector(self, pv: PropertyVector) -> None:
        """
        Register an existing property vector, replacing one of the same name.
        """
        if pv.name in self._properties:
            logger.debug("Replacing property vector '%s'.", pv.name)
        self._properties[pv.name] = pv

    def _mismatch(
        self,
        pv: PropertyVector,
        mesh_item_type: MeshItemType | None,
        n_components: int | None,
        dtype: Any,
    ) -> str | None:
        """Describe the first signature mismatch of ``pv``, or None."""
        if dtype is not None and not _dtype_matches(pv.dtype, dtype):
            return f"value type is {pv.dtype}, requested {_dtype_name(dtype)}"
        if mesh_item_type is not None and pv.mesh_item_type != mesh_item_type:
            return (
                f"mesh item type is {pv.mesh_item_type.name}, "
                f"requested {mesh_item_type.name}"
            )
        if n_components is not None and pv.n_components != n_components:
            return (
                f"number of components is {pv.n_components}, requested {n_components}"
            )
        return None

    def exists(
        self,
        name: str,
        mesh_item_type: MeshItemType | None = None,
        n_components: int | None = None,
        dtype: Any = None,
    ) -> bool:
        """
        Check whether a property with the given signature exists.

        Unspecified parts of the signature are not checked. Never raises.
        """
        pv = self._properties.get(name)
        if pv is None:
            return False
        return self._mismatch(pv, mesh_item_type, n_components, dtype) is None

    def get(
        self,
        name: str,
        mesh_item_type: MeshItemType | None = None,
        n_components: int | None = None,
        dtype: Any = None,
    ) -> PropertyVector | None:
        """
        Get a property vector by name, checking its signature.

        Returns
        -------
        PropertyVector or None
            The vector, or None if no property named ``name`` exists.

        Raises
        ------
        PropertyError
            If the property exists but its value type, mesh item type or
            number of components differs from the requested one.
        """
        pv = self._properties.get(name)
        if pv is None:
            return None
        mismatch = self._mismatch(pv, mesh_item_type, n_components, dtype)
        if mismatch is not None:
            raise PropertyError(f"Property vector '{name}': {mismatch}.", name=name)
        return pv

    def remove(self, name: str) -> PropertyVector | None:
        """Remove and return a property vector; None if it does not exist."""
        return self._properties.pop(name, None)

    def names(self, mesh_item_type: MeshItemType | None = None) -> list[str]:
        """Return property names, optionally restricted to one item type."""
        return [
            name
            for name, pv in self._properties.items()
            if mesh_item_type is None or pv.mesh_item_type == mesh_item_type
        ]

    def exclude_copy_properties(
        self,
        item_types: Iterable[MeshItemType] = (),
        names: Iterable[str] = (),
    ) -> Properties:
        """
        Return a deep copy without the given item types and names.
        """
        excluded_types = set(item_types)
        excluded_names = set(names)
        result = Properties()
        for name, pv in self._properties.items():
            if pv.mesh_item_type in excluded_types or name in excluded_names:
                continue
            result._properties[name] = pv.copy()
        return result

    def copy(self) -> Properties:
        """Return a deep copy of all property vectors."""
        return self.exclude_copy_properties()

    def __contains__(self, name: object) -> bool:
        return name in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    def __iter__(self) -> Iterator[tuple[str, PropertyVector]]:
        return iter(list(self._properties.items()))

    def __repr__(self) -> str:
        return f"Properties({sorted(self._properties)})"
