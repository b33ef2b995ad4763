"""Domain events.

Change events are coarse invalidation signals: they say that a topic
changed, never what changed. Subscribers respond by re-fetching.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar
from uuid import UUID, uuid4

PRODUCTS_TOPIC = "products"
CATEGORIES_TOPIC = "categories"


@dataclass(frozen=True)
class ChangeEvent:
    """Signal that a topic's collection changed.

    Attributes:
        event_id: Unique identifier for this event instance.
        topic: Logical topic, e.g. the products collection.
        occurred_at: Timestamp when the change was committed.
    """

    event_type: ClassVar[str] = "collection.changed"

    topic: str
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def message(self) -> str:
        """Human-readable form, e.g. "products changed"."""
        return f"{self.topic} changed"

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event.
        """
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "topic": self.topic,
            "occurred_at": self.occurred_at.isoformat(),
        }
