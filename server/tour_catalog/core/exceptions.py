"""Tour catalog errors rendered as RFC 9457 Problem Details."""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import uuid
from datetime import datetime

logger = logging.getLogger(__name__)

PROBLEM_BASE = "https://tour-catalog.example/problems"


class ProblemDetailsException(HTTPException):
    """
    Base for errors the catalog reports to clients.

    ``problem_details`` holds the response body: the standard members
    (type, title, status, detail, instance) merged with the error's
    extension members. See https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        body: Dict[str, Any] = {"type": self.type_uri, "title": title, "status": status_code}
        if detail:
            body["detail"] = detail
        if instance:
            body["instance"] = instance
        body.update(self.extensions)
        self.problem_details = body

        super().__init__(status_code=status_code, detail=body, headers=headers)


class TourValidationError(ProblemDetailsException):
    """Raised when a candidate tour record violates one or more field rules."""

    def __init__(
        self,
        violations: List[Any],
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        self.violations = list(violations)

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail or f"Tour record failed validation with {len(self.violations)} violation(s)",
            type_uri=f"{PROBLEM_BASE}/validation-error",
            instance=instance,
            extensions={
                "violations": [
                    v.model_dump(mode="json") if hasattr(v, "model_dump") else v
                    for v in self.violations
                ],
            },
        )

    @property
    def codes(self) -> List[str]:
        """Violation codes in reporting order."""
        codes = [getattr(v, "code", None) for v in self.violations]
        return [getattr(code, "value", code) for code in codes]


class NotFoundError(ProblemDetailsException):
    """No visible record matched the lookup."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id
            detail = detail or f"The requested {resource_type} with ID '{resource_id}' could not be found"

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail or f"The requested {resource_type} could not be found",
            type_uri=f"{PROBLEM_BASE}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the catalog",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        type_uri: str = f"{PROBLEM_BASE}/resource-conflict",
        title: str = "Resource Conflict",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=409,
            title=title,
            detail=detail,
            type_uri=type_uri,
            instance=instance,
            extensions={"conflicting_resource": conflicting_resource} if conflicting_resource else None,
        )


class DuplicateKeyError(ConflictError):
    """A unique field collides with an existing record, secret tours included."""

    def __init__(
        self,
        field: str,
        value: Any,
        existing_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        self.field = field
        self.value = value

        conflicting = {"field": field, "value": value}
        if existing_id:
            conflicting["id"] = existing_id

        super().__init__(
            detail=f"A tour with {field} '{value}' already exists",
            conflicting_resource=conflicting,
            type_uri=f"{PROBLEM_BASE}/duplicate-key",
            title="Duplicate Key",
            instance=instance,
        )


class InternalServerError(ProblemDetailsException):
    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE}/internal-server-error",
            instance=instance,
            extensions={
                "error_id": error_id or str(uuid.uuid4()),
                "timestamp": datetime.utcnow().isoformat() + "Z",
            },
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """Render a catalog error; ``instance`` defaults to the request path."""
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body shape errors as Problem Details with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "code": "INVALID_TYPE",
            "message": error.get("msg", "Invalid value"),
            "params": {"type": error.get("type")},
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{PROBLEM_BASE}/request-validation-error",
            "title": "Request Validation Error",
            "status": 422,
            "detail": "The request body does not match the expected shape",
            "instance": request.url.path,
            "violations": violations,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception under a fresh error id and return a 500 problem."""
    error = InternalServerError(instance=request.url.path)
    logger.error(
        "Unhandled exception",
        extra={"error_id": error.extensions["error_id"], "path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=error.problem_details)
