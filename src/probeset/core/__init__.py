from .primes import is_prime, smallest_prime_at_least
from .table import (
    DEFAULT_MIN_CAPACITY,
    ProbeSet,
    SlotState,
    Traversal,
    home_slot,
    probe_sequence,
    slot_state,
)

__all__ = [
    "DEFAULT_MIN_CAPACITY",
    "ProbeSet",
    "SlotState",
    "Traversal",
    "home_slot",
    "is_prime",
    "probe_sequence",
    "slot_state",
    "smallest_prime_at_least",
]
