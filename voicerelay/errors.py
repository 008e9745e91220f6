"""Shared error types for the voice relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RateLimitError(Exception):
    """Raised when a sliding-window rate limiter is saturated."""

    retry_in: float
    limit: int
    window_seconds: float


@dataclass(frozen=True, slots=True)
class UpstreamUnreachable(Exception):
    """The upstream realtime socket could not be opened. Fatal to the session, never retried here."""

    model: str
    reason: str

    def __str__(self) -> str:
        return f"upstream unreachable (model={self.model}): {self.reason}"


@dataclass(frozen=True, slots=True)
class MalformedEnvelope(Exception):
    """A message could not be parsed as the expected JSON event shape."""

    reason: str

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class ToolError(Exception):
    """A tool call failed: unknown tool name or the implementation raised."""

    name: str
    reason: str

    def __str__(self) -> str:
        return f"{self.name}: {self.reason}"


@dataclass(frozen=True, slots=True)
class AudioFormatError(Exception):
    """An audio frame does not match the session's fixed format."""

    expected_sample_rate_hz: int
    actual_sample_rate_hz: int

    def __str__(self) -> str:
        return (
            f"audio frame sample rate {self.actual_sample_rate_hz} Hz does not match the session rate"
            f" {self.expected_sample_rate_hz} Hz"
        )


@dataclass(frozen=True, slots=True)
class TokenIssueError(Exception):
    """A room access token could not be issued."""

    reason: str

    def __str__(self) -> str:
        return self.reason


__all__ = [
    "AudioFormatError",
    "MalformedEnvelope",
    "RateLimitError",
    "TokenIssueError",
    "ToolError",
    "UpstreamUnreachable",
]
