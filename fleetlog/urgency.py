"""UrgencyTier enum for upcoming-event severity."""

from enum import Enum


class UrgencyTier(Enum):
    """Urgency buckets. Lower value = more urgent."""

    OVERDUE = 1
    URGENT = 2
    SOON = 3
    SCHEDULED = 4

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    UrgencyTier.OVERDUE: "Vencido",
    UrgencyTier.URGENT: "Urgente",
    UrgencyTier.SOON: "Próximo",
    UrgencyTier.SCHEDULED: "Programado",
}


def most_severe(*tiers):
    """Return the most urgent of the given tiers, ignoring None."""
    present = [t for t in tiers if t is not None]
    if not present:
        return None
    return min(present, key=lambda t: t.value)
