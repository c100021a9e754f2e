"""
Base Domain Classes

Framework-free building blocks shared by the domain apps:
- ValueObject: Immutable objects compared by value
- DomainError: Base class for domain rule violations raised by services
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


class DomainError(Exception):
    """
    Base class for domain rule violations

    Services raise subclasses of this error; the API layer turns them
    into 400 responses with the error message.
    """

    default_message = "Domain rule violated"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
