"""Utility functions and helpers for placement resolution."""

from mcm_placement.utils.errors import (
    ConfigurationError,
    CopyError,
    NotFoundError,
    PlacementError,
    RegistryListError,
    SelectorConversionError,
)

__all__ = [
    # Errors
    "PlacementError",
    "SelectorConversionError",
    "NotFoundError",
    "RegistryListError",
    "CopyError",
    "ConfigurationError",
]
