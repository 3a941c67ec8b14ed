"""Error types for placement resolution and registry access."""


class PlacementError(Exception):
    """Base exception for placement errors."""

    pass


class SelectorConversionError(PlacementError):
    """A label selector could not be converted into a registry query."""

    pass


class NotFoundError(PlacementError):
    """The requested resource or resource collection does not exist."""

    def __init__(self, resource_type: str, name: str | None = None) -> None:
        self.resource_type = resource_type
        self.name = name
        if name:
            message = f"{resource_type} '{name}' not found"
        else:
            message = f"{resource_type} not found"
        super().__init__(message)


class RegistryListError(PlacementError):
    """Listing clusters from the registry failed for a reason other than not-found."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class CopyError(PlacementError):
    """A value could not be deep copied through its serialized form."""

    pass


class ConfigurationError(PlacementError):
    """Kubernetes client configuration is missing or unusable."""

    pass
