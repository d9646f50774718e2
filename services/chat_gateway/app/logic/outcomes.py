from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    RETRIABLE = "retriable"
    FATAL = "fatal"  # fatal for this candidate only
    TRANSPORT = "transport"


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one completion call against one candidate."""

    kind: OutcomeKind
    content: Optional[str] = None
    reason: Optional[str] = None
    status_code: Optional[int] = None
    error_code: Optional[Union[int, str]] = None

    @classmethod
    def success(cls, content: str, status_code: int = 200) -> "AttemptOutcome":
        return cls(OutcomeKind.SUCCESS, content=content, status_code=status_code)

    @classmethod
    def retriable(cls, reason: str, status_code: Optional[int] = None, error_code=None) -> "AttemptOutcome":
        return cls(OutcomeKind.RETRIABLE, reason=reason, status_code=status_code, error_code=error_code)

    @classmethod
    def fatal(cls, reason: str, status_code: Optional[int] = None, error_code=None) -> "AttemptOutcome":
        return cls(OutcomeKind.FATAL, reason=reason, status_code=status_code, error_code=error_code)

    @classmethod
    def transport(cls, reason: str) -> "AttemptOutcome":
        return cls(OutcomeKind.TRANSPORT, reason=reason)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS
