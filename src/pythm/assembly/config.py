"""
Selection of the element types local assemblers are created for.

:class:`EnabledElements` decides which cell types get a local assembler
builder. Defaults enable every supported cell type; deployments can narrow
the set through environment variables (see :meth:`EnabledElements.from_env`).
"""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field

from pythm.core.cell_types import CELL_TYPE_SPECS, CellType, ElementFamily, topology
from pythm.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Environment variable {name}: invalid boolean '{value}'")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Environment variable {name}: invalid integer '{value}'"
        ) from None


class EnabledElements(BaseModel):
    """Element families and limits enabled for local assembly."""

    simplex: bool = Field(default=True, description="Enable tetrahedra (and triangles)")
    cuboid: bool = Field(default=True, description="Enable hexahedra (and quads)")
    prism: bool = Field(default=True, description="Enable prisms")
    pyramid: bool = Field(default=True, description="Enable pyramids")
    max_element_dim: int = Field(default=3, ge=1, le=3, description="Largest element dimension")
    max_element_order: int = Field(default=2, ge=1, le=2, description="Largest element order")

    model_config = {"extra": "forbid"}

    @classmethod
    def from_env(cls) -> EnabledElements:
        """Create settings from environment variables.

        Reads:
        - PYTHM_ENABLE_ELEMENT_SIMPLEX
        - PYTHM_ENABLE_ELEMENT_CUBOID
        - PYTHM_ENABLE_ELEMENT_PRISM
        - PYTHM_ENABLE_ELEMENT_PYRAMID
        - PYTHM_MAX_ELEMENT_DIM
        - PYTHM_MAX_ELEMENT_ORDER

        Unset variables keep their defaults.

        Returns
        -------
        EnabledElements
            Settings populated from environment.
        """
        defaults = cls()
        settings = cls(
            simplex=_env_flag("PYTHM_ENABLE_ELEMENT_SIMPLEX", defaults.simplex),
            cuboid=_env_flag("PYTHM_ENABLE_ELEMENT_CUBOID", defaults.cuboid),
            prism=_env_flag("PYTHM_ENABLE_ELEMENT_PRISM", defaults.prism),
            pyramid=_env_flag("PYTHM_ENABLE_ELEMENT_PYRAMID", defaults.pyramid),
            max_element_dim=_env_int("PYTHM_MAX_ELEMENT_DIM", defaults.max_element_dim),
            max_element_order=_env_int(
                "PYTHM_MAX_ELEMENT_ORDER", defaults.max_element_order
            ),
        )
        logger.debug("Enabled elements from environment: %s", settings)
        return settings

    def enabled_families(self) -> set[ElementFamily]:
        """Return the element families enabled by these settings."""
        families: set[ElementFamily] = set()
        if self.simplex:
            families.add(ElementFamily.TET)
        if self.cuboid:
            families.add(ElementFamily.HEX)
        if self.prism:
            families.add(ElementFamily.PRISM)
        if self.pyramid:
            families.add(ElementFamily.PYRAMID)
        # Faces of the enabled volume elements.
        if self.simplex or self.prism or self.pyramid:
            families.add(ElementFamily.TRI)
        if self.cuboid or self.prism or self.pyramid:
            families.add(ElementFamily.QUAD)
        if families:
            families.add(ElementFamily.LINE)
        return families

    def is_enabled(self, cell_type: CellType) -> bool:
        """Return True if local assemblers may be built for ``cell_type``."""
        spec = CELL_TYPE_SPECS[cell_type]
        return (
            spec.family in self.enabled_families()
            and topology(cell_type).dimension <= self.max_element_dim
            and spec.order <= self.max_element_order
        )

    def enabled_cell_types(self) -> list[CellType]:
        """Return all enabled cell types in declaration order."""
        return [cell_type for cell_type in CellType if self.is_enabled(cell_type)]
