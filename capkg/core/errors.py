# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the package manager core.

All exceptions inherit from PackageManagerError for consistent error handling.
Each carries the structured data needed to render a precise diagnostic
(identity, cycle path, conflict pairs, underlying I/O cause).
"""

from typing import Any, Iterable, List, Optional


class PackageManagerError(Exception):
    """Base exception for all package manager errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize package manager error.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for reporting."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ParsingError(PackageManagerError):
    """Malformed dependency descriptor line or identity token."""

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
        token: Optional[str] = None
    ):
        """
        Initialize parsing error.

        Args:
            message: Parsing error message
            line: Offending line text
            line_number: 1-based line number in the descriptor
            token: Offending identity token
        """
        details = {}
        if line is not None:
            details["line"] = line
        if line_number is not None:
            details["line_number"] = line_number
        if token is not None:
            details["token"] = token
        super().__init__(message, details=details)
        self.line = line
        self.line_number = line_number
        self.token = token


class PackageNotFoundError(PackageManagerError):
    """A referenced dependency is absent from the graph."""

    def __init__(self, identity: Any, required_by: Any = None):
        """
        Initialize package not found error.

        Args:
            identity: Missing package identity
            required_by: Identity that declared the dependency, if known
        """
        message = f"Package not found: {identity}"
        if required_by is not None:
            message += f" (required by {required_by})"
        details = {"identity": str(identity)}
        if required_by is not None:
            details["required_by"] = str(required_by)
        super().__init__(message, details=details)
        self.identity = identity
        self.required_by = required_by


class CycleDetectedError(PackageManagerError):
    """A dependency cycle closes on an identity."""

    def __init__(self, identity: Any, path: Optional[List[Any]] = None):
        """
        Initialize cycle error.

        Args:
            identity: Identity that closed the cycle
            path: Cycle path, starting and ending with `identity`
        """
        self.identity = identity
        self.path = list(path) if path else [identity, identity]
        rendered = " -> ".join(str(p) for p in self.path)
        super().__init__(
            f"Dependency cycle detected at {identity}: {rendered}",
            details={"identity": str(identity), "path": [str(p) for p in self.path]}
        )


class ConflictDetectedError(PackageManagerError):
    """Unresolved version conflicts in the transitive closure."""

    def __init__(self, conflicts: Iterable[Any]):
        """
        Initialize conflict error.

        Args:
            conflicts: ConflictPair values
        """
        self.conflicts = set(conflicts)
        rendered = sorted(pair.render() for pair in self.conflicts)
        super().__init__(
            f"{len(rendered)} version conflict(s): " + "; ".join(rendered),
            details={"conflicts": rendered}
        )


class TransactionAlreadyCompletedError(PackageManagerError):
    """Rollback requested on a committed transaction."""

    def __init__(self, journal: Optional[str] = None):
        """
        Initialize already-completed error.

        Args:
            journal: Journal location, for diagnostics
        """
        message = "Transaction already completed and cannot be rolled back"
        if journal:
            message += f": {journal}"
        super().__init__(message, details={"journal": journal})
        self.journal = journal


class TransactionInterruptedError(PackageManagerError):
    """
    A new run was requested while the journal holds an unfinished transaction
    with recorded steps.

    The steps are kept until recover() hands them to whoever undoes them.
    """

    def __init__(self, journal: Optional[str], steps: List[str]):
        """
        Initialize interrupted transaction error.

        Args:
            journal: Journal location
            steps: Step descriptions of the unfinished transaction
        """
        super().__init__(
            f"Unfinished transaction with {len(steps)} step(s) in {journal}; run recovery first",
            details={"journal": journal, "steps": list(steps)}
        )
        self.journal = journal
        self.steps = list(steps)


class JournalIOError(PackageManagerError):
    """Durable resource failure; wraps the underlying I/O error."""

    def __init__(self, operation: str, location: str, cause: Exception):
        """
        Initialize journal I/O error.

        Args:
            operation: Resource operation that failed (append, read, truncate)
            location: Resource location
            cause: Underlying exception
        """
        super().__init__(
            f"Journal {operation} failed for {location}: {cause}",
            details={"operation": operation, "location": location, "cause": str(cause)}
        )
        self.operation = operation
        self.location = location
        self.cause = cause


class InstallStepFailedError(PackageManagerError):
    """The installer (or remover) failed for one identity."""

    def __init__(self, identity: Any, cause: Exception):
        """
        Initialize install step error.

        Args:
            identity: Identity whose step failed
            cause: Exception raised by the collaborator
        """
        super().__init__(
            f"Step failed for {identity}: {cause}",
            details={"identity": str(identity), "cause": str(cause)}
        )
        self.identity = identity
        self.cause = cause


class RollbackFailedError(PackageManagerError):
    """
    A step failed and the rollback that followed failed too.

    The journal cannot be trusted to reflect a clean state; operator
    attention is required.
    """

    def __init__(self, failure: PackageManagerError, rollback_error: Exception):
        """
        Initialize compound rollback error.

        Args:
            failure: The step failure that triggered the rollback
            rollback_error: The rollback failure
        """
        super().__init__(
            f"{failure.message}; rollback also failed: {rollback_error}",
            details={
                "failure": failure.to_dict(),
                "rollback_error": str(rollback_error)
            }
        )
        self.failure = failure
        self.rollback_error = rollback_error


class LockUnavailableError(PackageManagerError):
    """The exclusive installation lock is held elsewhere or cannot be taken."""

    def __init__(self, name: str, reason: str = "lock is held by another process"):
        super().__init__(f"Cannot acquire lock '{name}': {reason}", details={"lock": name})
        self.name = name


class PackageInUseError(PackageManagerError):
    """Removal refused because installed packages still depend on the target."""

    def __init__(self, identity: Any, dependents: List[Any]):
        rendered = ", ".join(str(d) for d in dependents)
        super().__init__(
            f"Cannot remove {identity}: required by {rendered}",
            details={"identity": str(identity), "dependents": [str(d) for d in dependents]}
        )
        self.identity = identity
        self.dependents = list(dependents)


class ConfigurationError(PackageManagerError):
    """Configuration error."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize configuration error.

        Args:
            message: Configuration error message
            config_file: Configuration file path
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.config_file = config_file
