"""Local assembler dispatch for element-wise process kernels."""

from __future__ import annotations

from pythm.assembly.config import EnabledElements
from pythm.assembly.create_local_assemblers import (
    create_local_assemblers,
    transform_dereferenced,
)
from pythm.assembly.local_assembler import LocalAssemblerData, LocalAssemblerInterface
from pythm.assembly.local_data_initializer import LocalDataInitializer

__all__ = [
    "EnabledElements",
    "LocalAssemblerInterface",
    "LocalAssemblerData",
    "LocalDataInitializer",
    "create_local_assemblers",
    "transform_dereferenced",
]
