from __future__ import annotations


class CodeRabbitMCPError(Exception):
    """Base error for the CodeRabbit MCP server."""


class ValidationError(CodeRabbitMCPError):
    """Raised when user input is invalid."""


class NotFoundError(CodeRabbitMCPError):
    """Raised when a requested resource is not found."""


class ExternalServiceError(CodeRabbitMCPError):
    """Raised when an external service (CodeRabbit/GitHub) fails."""


class RateLimitExceededError(ExternalServiceError):
    """Raised when the GitHub API quota is exhausted."""


class EndpointUnavailableError(CodeRabbitMCPError):
    """Raised by CodeRabbit operations that the public API no longer offers."""


class GitOperationError(CodeRabbitMCPError):
    """Raised when a local git command fails or the working tree is unsafe."""
