"""Built-in components.

Each module defines one static :class:`ComponentDescriptor` named
``DESCRIPTOR``.  :data:`BUILTIN_DESCRIPTORS` lists them for
:func:`operator_bundler.registry.build_default_registry`.
"""
from __future__ import annotations

from operator_bundler.components import (
    certmanager,
    gpuoperator,
    networkoperator,
    nvsentinel,
    skyhook,
)

BUILTIN_DESCRIPTORS = (
    certmanager.DESCRIPTOR,
    gpuoperator.DESCRIPTOR,
    networkoperator.DESCRIPTOR,
    nvsentinel.DESCRIPTOR,
    skyhook.DESCRIPTOR,
)

__all__ = ["BUILTIN_DESCRIPTORS"]
