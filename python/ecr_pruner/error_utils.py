"""
Error types for the image pruner, with actionable guidance for operators.

Registry and deletion failures are reported as RegistryError, which carries
suggested fixes derived from the underlying AWS error. ListRepositoriesError
and AggregateError are the only failures that reach the caller of a run.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    RESOURCE = "resource"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [self.message]

        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\nAdditional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class RegistryError(ActionableError):
    """Failure reported by the registry or deletion transport"""

    def __init__(self, message: str, operation: str, repository: Optional[str] = None,
                 error_code: Optional[str] = None, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.repository = repository
        self.error_code = error_code
        super().__init__(message, category=category, suggestions=suggestions, details=details)


class ListRepositoriesError(Exception):
    """Listing repositories failed; the whole run is aborted."""

    def __init__(self, cause: Exception):
        self.cause = cause
        message = cause.message if isinstance(cause, ActionableError) else str(cause)
        super().__init__(f"Failed to list repositories: {message}")


class AggregateError(Exception):
    """One or more repositories failed during a run.

    Deletions completed for other repositories are not rolled back.
    """

    def __init__(self, failed_count: int, failed_repositories: Optional[List[str]] = None, summary: Any = None):
        self.failed_count = failed_count
        self.failed_repositories = failed_repositories or []
        self.summary = summary
        super().__init__(f"{failed_count} errors occurred!")


# AWS error codes grouped by the category they map to
_PERMISSION_CODES = {"AccessDeniedException", "AccessDenied", "UnauthorizedOperation"}
_AUTH_CODES = {"UnrecognizedClientException", "InvalidSignatureException", "ExpiredTokenException",
               "NoCredentialsError", "InvalidClientTokenId"}
_THROTTLE_CODES = {"ThrottlingException", "TooManyRequestsException", "LimitExceededException",
                   "RequestLimitExceeded"}
_RESOURCE_CODES = {"RepositoryNotFoundException", "RegistryNotFoundException", "ImageNotFoundException"}
_CONNECTION_CODES = {"EndpointConnectionError", "ConnectTimeoutError", "ReadTimeoutError",
                     "ConnectionClosedError"}


def _error_code(error: Exception) -> str:
    """Extract an AWS error code from a botocore exception, or the exception's class name."""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code = response.get("Error", {}).get("Code")
        if code:
            return code
    return type(error).__name__


def create_registry_error(operation: str, error: Exception, repository: Optional[str] = None) -> RegistryError:
    """Create actionable error for a failed registry call

    Args:
        operation: Registry API operation that failed (e.g. "list_images")
        error: Original exception raised by the transport
        repository: Repository the call was made for, if any

    Returns:
        RegistryError describing the failure
    """
    code = _error_code(error)
    target = f" for repository '{repository}'" if repository else ""

    suggestions = [
        "Verify AWS credentials and region are configured for the ECR registry",
        "Check the IAM policy allows ecr:DescribeRepositories, ecr:ListImages and ecr:BatchDeleteImage",
    ]

    if code in _PERMISSION_CODES:
        category = ErrorCategory.PERMISSION
        suggestions.insert(0, f"Grant the execution role permission for the {operation} call")
    elif code in _AUTH_CODES:
        category = ErrorCategory.AUTHENTICATION
        suggestions.insert(0, "Refresh or rotate the AWS credentials used by the job")
    elif code in _THROTTLE_CODES:
        category = ErrorCategory.NETWORK
        suggestions.insert(0, "Lower cleanup.max_workers to reduce concurrent registry calls")
        suggestions.insert(1, "The next scheduled run will retry this repository")
    elif code in _RESOURCE_CODES:
        category = ErrorCategory.RESOURCE
        suggestions.insert(0, "Verify the repository still exists in the configured registry")
    elif code in _CONNECTION_CODES:
        category = ErrorCategory.CONNECTION
        suggestions.insert(0, "Check network connectivity to the ECR endpoint")
    else:
        category = ErrorCategory.UNKNOWN

    return RegistryError(
        message=f"Registry operation {operation} failed{target}: {error}",
        operation=operation,
        repository=repository,
        error_code=code,
        category=category,
        suggestions=suggestions,
        details={
            "operation": operation,
            "repository": repository,
            "error_type": type(error).__name__,
            "error_code": code,
        },
    )
