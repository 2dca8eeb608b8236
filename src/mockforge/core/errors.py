"""Error taxonomy shared by the mock endpoint and the management API.

Every error carries the HTTP status it is rendered with; the API layer turns
it into ``{"error": {"message": ..., "status": ...}}``.
"""

from __future__ import annotations

from collections.abc import Iterable


class MockForgeError(Exception):
    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, dict[str, str | int]]:
        return {"error": {"message": self.message, "status": self.status}}


class ProjectNotFound(MockForgeError):
    status = 404

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project {project_id} not found")


class ResourceNotFound(MockForgeError):
    status = 404

    def __init__(self, resource: str) -> None:
        super().__init__(f"Resource {resource} not found")


class RecordNotFound(MockForgeError):
    status = 404

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record with id {record_id} not found")


class MethodNotAllowed(MockForgeError):
    status = 405

    def __init__(self, method: str) -> None:
        super().__init__(f"{method} method not allowed for this resource")


class InvalidJSON(MockForgeError):
    status = 400

    def __init__(self, message: str = "Invalid JSON in request body") -> None:
        super().__init__(message)


class InvalidFields(MockForgeError):
    status = 400

    def __init__(self, invalid: Iterable[str], allowed: Iterable[str]) -> None:
        self.invalid = list(invalid)
        self.allowed = list(allowed)
        super().__init__(f"Invalid fields: {', '.join(self.invalid)}. Allowed fields: {', '.join(self.allowed)}")


class InvalidTemplate(MockForgeError):
    status = 400


class ResourceConflict(MockForgeError):
    status = 409

    def __init__(self, name: str) -> None:
        super().__init__(f"Resource {name} already exists in this project")


class InternalError(MockForgeError):
    status = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


class MacroResolutionError(LookupError):
    """Raised when a macro path does not name a registered generator.

    The template compiler recovers from it locally; it never reaches a client.
    """
