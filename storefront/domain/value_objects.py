"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Self

from storefront.domain.base import ValueObject
from storefront.domain.exceptions import ValidationError

_WHITESPACE_RUN = re.compile(r"\s+")

# Matches the NUMERIC(12, 2) price column
PRICE_STEP = Decimal("0.01")
PRICE_LIMIT = Decimal("10000000000")


# ============================================================================
# Slug
# ============================================================================


@dataclass(frozen=True)
class Slug(ValueObject):
    """URL-safe identifier derived from a display name."""

    value: str

    @classmethod
    def from_name(cls, name: str) -> Self:
        """Derive a slug from a display name.

        The name is trimmed, lowercased and every internal whitespace run
        is collapsed to a single hyphen, so "Wrist  Watches " becomes
        "wrist-watches".

        Args:
            name: Display name entered by an admin.

        Returns:
            Slug for the name.

        Raises:
            ValidationError: If the name is empty after trimming.
        """
        trimmed = (name or "").strip()
        if not trimmed:
            raise ValidationError("name", "must not be empty")
        return cls(value=_WHITESPACE_RUN.sub("-", trimmed.lower()))

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


# ============================================================================
# Price
# ============================================================================


@dataclass(frozen=True)
class Price(ValueObject):
    """Non-negative, currency-agnostic price magnitude."""

    amount: Decimal

    @classmethod
    def parse(cls, raw: Any) -> Self:
        """Parse a price as submitted by a form or API client.

        Args:
            raw: Number or numeric string.

        Returns:
            Price instance.

        Raises:
            ValidationError: If the value is not a finite, non-negative number
                with at most two decimal places that the price column can hold.
        """
        if raw is None or isinstance(raw, bool):
            raise ValidationError("price", "must be a number")
        text = raw.strip() if isinstance(raw, str) else str(raw)
        if not text:
            raise ValidationError("price", "must not be empty")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError("price", f"'{text}' is not a number") from None
        if not amount.is_finite():
            raise ValidationError("price", "must be a finite number")
        if amount < 0:
            raise ValidationError("price", "must not be negative")
        if amount >= PRICE_LIMIT:
            raise ValidationError("price", f"must be less than {PRICE_LIMIT}")
        if amount != amount.quantize(PRICE_STEP):
            raise ValidationError("price", "must have at most two decimal places")
        return cls(amount=amount)

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.amount)


# ============================================================================
# Labels
# ============================================================================


def dedupe_labels(labels: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Normalize a size or color list.

    Labels are trimmed, empty labels dropped and repeats removed while
    keeping the first occurrence's position.

    Args:
        labels: Labels as entered.

    Returns:
        Ordered, de-duplicated labels.
    """
    result: list[str] = []
    for label in labels or ():
        cleaned = label.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return tuple(result)


# ============================================================================
# Admin Capability
# ============================================================================


@dataclass(frozen=True)
class AdminContext(ValueObject):
    """Capability token proving an admin session is present.

    The surrounding application creates one after authenticating the
    caller and passes it explicitly to every catalog write.

    Attributes:
        actor_id: Identifier of the signed-in admin.
        authenticated_at: When the session was established.
    """

    actor_id: str
    authenticated_at: datetime

    @classmethod
    def for_actor(cls, actor_id: str) -> Self:
        """Create a capability for an authenticated admin.

        Args:
            actor_id: Identifier of the signed-in admin.

        Returns:
            AdminContext stamped with the current time.
        """
        return cls(actor_id=actor_id, authenticated_at=datetime.now(timezone.utc))
