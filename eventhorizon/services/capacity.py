"""Capacity guard for event registration.

Both functions are pure; callers validate that counts are positive before
asking (a non-positive request is a rejected request, not a guard decision).
"""


def can_register(max_attendees: int, current_total: int, requested_count: int) -> bool:
    """Return True if ``requested_count`` more attendees still fit the event."""
    return current_total + requested_count <= max_attendees


def remaining_capacity(max_attendees: int, current_total: int) -> int:
    return max(max_attendees - current_total, 0)
