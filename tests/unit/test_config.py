"""Unit tests for the element configuration."""

from __future__ import annotations

import pydantic
import pytest

from pythm.assembly.config import EnabledElements
from pythm.core.cell_types import CellType, ElementFamily
from pythm.core.exceptions import ConfigurationError

_ENV_VARS = (
    "PYTHM_ENABLE_ELEMENT_SIMPLEX",
    "PYTHM_ENABLE_ELEMENT_CUBOID",
    "PYTHM_ENABLE_ELEMENT_PRISM",
    "PYTHM_ENABLE_ELEMENT_PYRAMID",
    "PYTHM_MAX_ELEMENT_DIM",
    "PYTHM_MAX_ELEMENT_ORDER",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove all pythm element variables from the environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEnabledElements:
    """Tests for EnabledElements."""

    def test_defaults_enable_everything_but_points(self) -> None:
        """Test that all assemblable cell types are enabled by default."""
        enabled = EnabledElements()

        assert enabled.enabled_cell_types() == [
            c for c in CellType if c != CellType.POINT1
        ]

    def test_extra_fields_forbidden(self) -> None:
        """Test that unknown settings are rejected."""
        with pytest.raises(pydantic.ValidationError):
            EnabledElements(hexahedron=True)  # type: ignore[call-arg]

    def test_bounds(self) -> None:
        """Test limits of the dimension and order settings."""
        with pytest.raises(pydantic.ValidationError):
            EnabledElements(max_element_dim=4)
        with pytest.raises(pydantic.ValidationError):
            EnabledElements(max_element_order=0)

    def test_faces_follow_volume_families(self) -> None:
        """Test that volume families enable their face families."""
        prism_only = EnabledElements(simplex=False, cuboid=False, pyramid=False)
        assert prism_only.enabled_families() == {
            ElementFamily.PRISM,
            ElementFamily.TRI,
            ElementFamily.QUAD,
            ElementFamily.LINE,
        }

        cuboid_only = EnabledElements(simplex=False, prism=False, pyramid=False)
        assert ElementFamily.TRI not in cuboid_only.enabled_families()

    def test_nothing_enabled(self) -> None:
        """Test that disabling all families disables lines too."""
        enabled = EnabledElements(simplex=False, cuboid=False, prism=False, pyramid=False)

        assert enabled.enabled_families() == set()
        assert enabled.enabled_cell_types() == []

    def test_max_element_dim(self) -> None:
        """Test the dimension limit."""
        enabled = EnabledElements(max_element_dim=2)

        assert enabled.is_enabled(CellType.QUAD8)
        assert not enabled.is_enabled(CellType.TET4)
        assert not enabled.is_enabled(CellType.PYRAMID5)


class TestFromEnv:
    """Tests for EnabledElements.from_env."""

    def test_unset(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that unset variables keep the defaults."""
        assert EnabledElements.from_env() == EnabledElements()

    def test_values(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test reading flags and limits."""
        clean_env.setenv("PYTHM_ENABLE_ELEMENT_PYRAMID", "off")
        clean_env.setenv("PYTHM_ENABLE_ELEMENT_PRISM", " No ")
        clean_env.setenv("PYTHM_MAX_ELEMENT_ORDER", "1")

        enabled = EnabledElements.from_env()

        assert not enabled.pyramid
        assert not enabled.prism
        assert enabled.simplex
        assert enabled.max_element_order == 1
        assert not enabled.is_enabled(CellType.HEX20)

    def test_invalid_flag(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that a malformed boolean is a configuration error."""
        clean_env.setenv("PYTHM_ENABLE_ELEMENT_SIMPLEX", "maybe")

        with pytest.raises(ConfigurationError, match="invalid boolean 'maybe'"):
            EnabledElements.from_env()

    def test_invalid_integer(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that a malformed integer is a configuration error."""
        clean_env.setenv("PYTHM_MAX_ELEMENT_DIM", "three")

        with pytest.raises(ConfigurationError, match="PYTHM_MAX_ELEMENT_DIM"):
            EnabledElements.from_env()

    def test_out_of_range(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that values outside the allowed range are rejected."""
        clean_env.setenv("PYTHM_MAX_ELEMENT_DIM", "5")

        with pytest.raises(pydantic.ValidationError):
            EnabledElements.from_env()
