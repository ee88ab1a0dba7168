"""Error taxonomy for graph validation runs.

Three families, reported at different levels:

  Ingest errors      — one credential document could not become quads.
                       Recorded per document; other documents continue.
  Rule errors        — a rule could not be applied. Stops the remaining
                       rules; derived facts stay in the store.
  Resolution issues  — malformed graph shapes. Never raised; the resolver
                       degrades (unnamed / unverified) instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    RDF_GRAPH_ERROR = "RDF_GRAPH_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    RULE_CATALOG_ERROR = "RULE_CATALOG_ERROR"
    BUILTIN_ERROR = "BUILTIN_ERROR"
    RULE_APPLICATION_ERROR = "RULE_APPLICATION_ERROR"
    INFERENCE_STATE_ERROR = "INFERENCE_STATE_ERROR"


class CredGraphError(Exception):
    """Base class for all credgraph errors."""

    code = ErrorCode.PROCESSING_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class IngestError(CredGraphError):
    """A credential document could not be converted to quads."""

    code = ErrorCode.RDF_GRAPH_ERROR


class RuleCatalogError(CredGraphError):
    """The rule catalog failed load-time validation."""

    code = ErrorCode.RULE_CATALOG_ERROR


class BuiltinError(CredGraphError):
    """A built-in predicate received unbound or ill-typed arguments."""

    code = ErrorCode.BUILTIN_ERROR


class RuleApplicationError(CredGraphError):
    """Applying one rule of the catalog failed."""

    code = ErrorCode.RULE_APPLICATION_ERROR

    def __init__(self, rule_id: str, message: str) -> None:
        super().__init__(f"Rule '{rule_id}': {message}")
        self.rule_id = rule_id


class InferenceStateError(CredGraphError):
    """An inference run was asked to run twice."""

    code = ErrorCode.INFERENCE_STATE_ERROR


@dataclass(frozen=True)
class ValidationIssue:
    """A reportable error: code, message, and where it came from."""
    code: ErrorCode
    message: str
    source: str = ""

    @staticmethod
    def from_error(error: CredGraphError, source: str = "") -> ValidationIssue:
        return ValidationIssue(code=error.code, message=str(error), source=source)

    def __repr__(self) -> str:
        src = f" [{self.source}]" if self.source else ""
        return f"{self.code.value}{src}: {self.message}"
