"""Base classes for domain layer.

Provides foundational abstractions for value objects and entities.
"""

from abc import ABC
from dataclasses import dataclass


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They have no lifecycle and are interchangeable
    when their values are equal.

    Example:
        @dataclass(frozen=True)
        class Slug(ValueObject):
            value: str
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


@dataclass(frozen=True)
class Entity(ABC):
    """Base class for catalog records.

    Records are immutable snapshots of a persisted row. Two records are
    equal only if every attribute matches, which lets cached listings be
    compared for staleness.

    Attributes:
        id: Unique identifier assigned by the relational store.
    """

    id: str

    def same_identity(self, other: "Entity") -> bool:
        """Check whether two records describe the same stored row.

        Args:
            other: Record to compare with.

        Returns:
            True if other is same type with same id.
        """
        return isinstance(other, self.__class__) and self.id == other.id
