"""Typed errors raised by the pipeline and its collaborator adapters.

Field validators never raise; they return structured results. These classes
cover the cases a caller has to handle explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class PipelineError(Exception):
    def __init__(
        self,
        message: str,
        error_code: str = "PIPELINE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class JobValidationError(PipelineError):
    """A form has blocking validation errors and cannot be saved or published."""

    def __init__(
        self,
        errors: Dict[str, List[str]],
        warnings: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        self.errors = errors
        self.warnings = warnings or {}
        fields = ", ".join(sorted(errors))
        super().__init__(
            message=f"Job form has blocking errors in: {fields}",
            error_code="JOB_VALIDATION_FAILED",
            details={"errors": errors, "warnings": self.warnings},
        )


class InvalidDeadlineError(PipelineError, ValueError):
    def __init__(self, value: str) -> None:
        super().__init__(
            message=f"Application deadline is not a valid date: {value!r}",
            error_code="INVALID_DEADLINE",
            details={"value": value},
        )


class StoreError(PipelineError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(
            message=message,
            error_code="STORE_REQUEST_FAILED",
            details={"status_code": status_code},
        )


class TaxonomyError(PipelineError):
    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(
            message=f"{source}: {message}",
            error_code="TAXONOMY_UNAVAILABLE",
            details={"source": source},
        )
