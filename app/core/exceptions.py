"""Error kinds raised by the registry and mapped to responses by the API layer."""


class RegistryError(Exception):
    """Base class for every failure the registry reports to its caller."""

    kind = "RegistryError"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BadRequest(RegistryError):
    kind = "BadRequest"


class Unauthorized(RegistryError):
    kind = "Unauthorized"


class ReservedCode(RegistryError):
    kind = "ReservedCode"


class CodeConflict(RegistryError):
    kind = "CodeConflict"


class NotFound(RegistryError):
    kind = "NotFound"


class ReservedPath(NotFound):
    """A reserved path segment was looked up as if it were a short code."""

    kind = "ReservedPath"


class GenerationExhausted(RegistryError):
    kind = "GenerationExhausted"


class StorageFailure(RegistryError):
    kind = "StorageFailure"


class DuplicateCode(Exception):
    """Raised by record stores when an insert or rename would duplicate a live code."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code
