"""Domain-specific exceptions"""

from enum import Enum
from typing import List, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InsufficientDataError(DomainException):
    """No transaction history available to score"""

    pass


class FailureKind(str, Enum):
    """How a single model candidate failed"""

    TRANSPORT = "transport"
    PARSE = "parse"
    VALIDATION = "validation"


class ProviderFailure(DomainException):
    """One model candidate failed; the caller escalates to the next candidate"""

    def __init__(self, model: str, kind: FailureKind, message: str):
        super().__init__(f"{model} {kind.value} failure: {message}")
        self.model = model
        self.kind = kind


class ExplanationError(DomainException):
    """The explanation stage produced no narrative"""

    pass


class ExplanationConfigurationError(ExplanationError):
    """No credential configured for the generative language service"""

    pass


class ExplanationExhausted(ExplanationError):
    """Every model candidate failed or the deadline ran out"""

    def __init__(self, message: str, attempts: Optional[List[ProviderFailure]] = None):
        super().__init__(message)
        self.attempts = attempts or []

    @property
    def last_error(self) -> Optional[ProviderFailure]:
        return self.attempts[-1] if self.attempts else None


class PersistenceError(DomainException):
    """Report store rejected or failed the write"""

    pass
