"""Exception hierarchy for the discovery server."""


class DiscoveryError(Exception):
    """Base exception for discovery server errors."""


class RegistryError(DiscoveryError):
    """Raised when the API grouping registry cannot be built."""


class InvalidQueryError(DiscoveryError):
    """Raised when a discovery query cannot be interpreted."""


class DeclarationSourceError(DiscoveryError):
    """Raised when a declaration source fails to read a declaration."""

    def __init__(self, type_name: str, reason: str) -> None:
        self.type_name = type_name
        self.reason = reason
        super().__init__(f"Failed to read declaration for '{type_name}': {reason}")


class DeclarationParseError(DiscoveryError):
    """Raised when declaration text cannot be parsed."""

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)
