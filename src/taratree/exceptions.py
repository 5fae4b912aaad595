"""Exception hierarchy for graph validation and evaluation errors."""

from typing import Any


class TaraTreeError(Exception):
    """Base exception for TaraTree errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to JSON-serializable dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class UnknownNodeError(TaraTreeError):
    """Raised when a caller references a node id that is not in the graph."""

    def __init__(self, node_id: str) -> None:
        super().__init__(
            message=f"Node not found: {node_id}",
            error_code="NODE_NOT_FOUND",
            details={"node_id": node_id},
        )


class DuplicateNodeError(TaraTreeError):
    """Raised when two nodes share one id."""

    def __init__(self, node_id: str) -> None:
        super().__init__(
            message=f"Duplicate node id: {node_id}",
            error_code="DUPLICATE_NODE",
            details={"node_id": node_id},
        )


class TopologyError(TaraTreeError):
    """Base class for rejected graph mutations."""

    def __init__(
        self,
        message: str,
        error_code: str,
        source_id: str,
        target_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.source_id = source_id
        self.target_id = target_id
        merged = {"source_id": source_id, "target_id": target_id}
        merged.update(details or {})
        super().__init__(message=message, error_code=error_code, details=merged)


class CycleError(TopologyError):
    """Raised when a link would close a loop in the graph."""

    def __init__(self, source_id: str, target_id: str) -> None:
        super().__init__(
            message=f"Linking '{source_id}' to '{target_id}' would create a cycle",
            error_code="WOULD_CREATE_CYCLE",
            source_id=source_id,
            target_id=target_id,
        )


class IllegalCircumventAttachmentError(TopologyError):
    """Raised when a circumvent tree is attached under an incompatible gate."""

    def __init__(self, source_id: str, target_id: str, reason: str) -> None:
        super().__init__(
            message=f"Cannot attach circumvent tree '{target_id}' to '{source_id}': {reason}",
            error_code="ILLEGAL_CIRCUMVENT_ATTACHMENT",
            source_id=source_id,
            target_id=target_id,
            details={"reason": reason},
        )


class LeafLinkError(TopologyError):
    """Raised when an outgoing link is requested from an attack leaf."""

    def __init__(self, source_id: str, target_id: str) -> None:
        super().__init__(
            message=f"Attack leaf '{source_id}' cannot have outgoing links",
            error_code="LEAF_CANNOT_HAVE_CHILDREN",
            source_id=source_id,
            target_id=target_id,
        )


class DuplicateLinkError(TopologyError):
    """Raised when the link already exists."""

    def __init__(self, source_id: str, target_id: str) -> None:
        super().__init__(
            message=f"'{source_id}' already links to '{target_id}'",
            error_code="DUPLICATE_LINK",
            source_id=source_id,
            target_id=target_id,
        )


class MissingLinkEndpointError(TopologyError):
    """Raised when either end of a requested link is not in the graph."""

    def __init__(self, source_id: str, target_id: str, missing_id: str) -> None:
        super().__init__(
            message=f"Cannot link '{source_id}' to '{target_id}': node not found: {missing_id}",
            error_code="NODE_NOT_FOUND",
            source_id=source_id,
            target_id=target_id,
            details={"node_id": missing_id},
        )


class LinkNotFoundError(TopologyError):
    """Raised when removing a link that does not exist."""

    def __init__(self, source_id: str, target_id: str) -> None:
        super().__init__(
            message=f"'{source_id}' does not link to '{target_id}'",
            error_code="LINK_NOT_FOUND",
            source_id=source_id,
            target_id=target_id,
        )


class ProjectLoadError(TaraTreeError):
    """Raised when a project file cannot be read into a graph."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to load project '{path}': {reason}",
            error_code="PROJECT_LOAD_ERROR",
            details={"path": path, "reason": reason},
        )
