"""
Core business exceptions for the preloader application.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains. Every failure of a
single year's pipeline is raised as a subclass of PreloaderError so the
orchestrator can record it without touching sibling years.
"""


class PreloaderError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(PreloaderError):
    """Raised for errors related to application configuration."""
    pass


class ConstructionError(ConfigurationError):
    """Raised when a Ces is requested for an unsupported year."""
    pass


# --- Infrastructure Errors ---

class InfrastructureError(PreloaderError):
    """Base class for errors related to external systems (network, disk)."""
    pass


class FetchError(InfrastructureError):
    """Raised when the archive for a year cannot be downloaded."""

    def __init__(self, year: int, cause: Exception, retryable: bool = False):
        super().__init__(f"[{year}] download failed: {cause}")
        self.year = year
        self.cause = cause
        self.retryable = retryable


class StorageError(InfrastructureError):
    """Raised when the local extract cannot be checked, written or read."""
    pass


# --- Domain/Business Logic Errors ---

class DomainError(PreloaderError):
    """Base class for errors related to business logic failures."""
    pass


class SelectionError(DomainError):
    """Raised when the target entry cannot be taken out of an archive."""
    pass


class CorruptArchiveError(SelectionError):
    """Raised when the downloaded bytes are not a readable ZIP archive."""
    pass


class EntryNotFoundError(SelectionError):
    """Raised when no archive entry matches the selection filters."""
    pass


class VerificationError(DomainError):
    """Raised when a verification step fails (e.g., checksum mismatch)."""
    pass


class NoReferenceDigestError(VerificationError):
    """Raised when there is no pinned digest to compare against."""
    pass


class DigestMismatchError(VerificationError):
    """Raised when the computed digest differs from the pinned one."""

    def __init__(self, message: str, expected: str, actual: str):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


# --- Orchestration Errors ---

class PipelineError(PreloaderError):
    """Wraps the failure of one year's pipeline with the stage it hit."""

    def __init__(self, year: int, stage, cause: Exception):
        super().__init__(f"[{year}] failed while {stage.value}: {cause}")
        self.year = year
        self.stage = stage
        self.cause = cause


class FleetError(PreloaderError):
    """Raised after a fleet run when one or more years failed."""

    def __init__(self, report):
        failed = sorted(report.failures)
        super().__init__(
            f"{len(failed)} year(s) failed: {', '.join(map(str, failed))}"
        )
        self.report = report
