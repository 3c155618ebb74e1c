"""Open-addressing hash set with quadratic probing and lazy deletion."""

from . import analysis, contracts, core, io
from .core import ProbeSet, SlotState, Traversal, smallest_prime_at_least
from .records import StudentRecord, parse_record, parse_search_key

__all__ = [
    "ProbeSet",
    "SlotState",
    "StudentRecord",
    "Traversal",
    "analysis",
    "contracts",
    "core",
    "io",
    "parse_record",
    "parse_search_key",
    "smallest_prime_at_least",
]
