"""Error types raised by tiptap-cli."""


class TiptapCliError(Exception):
    """Base error for all expected CLI failures."""


class ConfigError(TiptapCliError):
    """Project configuration is missing, invalid, or cannot be resolved."""


class ProjectCreationError(TiptapCliError):
    """A new project could not be scaffolded."""


class AuthError(TiptapCliError):
    """Authentication with the registry failed."""


class RegistryError(TiptapCliError):
    """A registry request failed."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RegistryUnauthorizedError(RegistryError):
    """The registry rejected the request with 401."""


class RegistryForbiddenError(RegistryError):
    """The registry rejected the request with 403 (plan upgrade required)."""


class RegistryNotFoundError(RegistryError):
    """The requested component does not exist (404)."""


class RegistryFetchError(RegistryError):
    """Network failure or any other non-2xx response."""


class RegistryParseError(RegistryError):
    """The registry returned JSON that does not match the expected schema."""
