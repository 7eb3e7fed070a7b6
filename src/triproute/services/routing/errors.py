"""Errors raised while building an activity order suggestion."""

from __future__ import annotations


class RouteOptimizationError(Exception):
    """Base class for suggestion failures; callers keep the manual order."""


class MatrixValidationError(RouteOptimizationError, ValueError):
    """Matrix request rejected locally, before any network call."""


class ExternalServiceError(RouteOptimizationError, ConnectionError):
    """The routing service failed or answered with something unusable."""


class DurationParseError(ExternalServiceError):
    """A duration in the matrix response could not be read."""


class SuggestionTimeout(RouteOptimizationError, TimeoutError):
    """The run did not finish before its deadline."""


class RateLimitTimeout(SuggestionTimeout):
    """No rate limiter slot became available before the deadline."""
