"""Display text for available ticket counts."""
from typing import Iterable, List

SOLD_OUT = 'SOLD OUT'
SEATS_LEFT = '{count} seats left'

# Counts above this are not shown
LOW_AVAILABILITY_THRESHOLD = 10


def format_tickets(count: int) -> str:
    """
    Render a ticket count.

    Args:
        count: Number of tickets still available

    Returns:
        "SOLD OUT" for 0, "<count> seats left" up to the threshold,
        an empty string otherwise
    """
    if count == 0:
        return SOLD_OUT
    if 0 < count <= LOW_AVAILABILITY_THRESHOLD:
        return SEATS_LEFT.format(count=count)
    return ''


class TicketAvailabilityFormatter:
    """Formatter for integer ticket count fields."""

    def view_elements(self, counts: Iterable[int]) -> List[str]:
        """Return one markup string per field item."""
        return [format_tickets(count) for count in counts]
