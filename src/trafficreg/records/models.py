"""
Traffic Signal Record Model (Functional Core)

Defines the ``SignalRecord`` value held by the store and the congestion
rule derived from density.  No I/O happens here.

Package Location: src/trafficreg/records/models.py
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

# A signal is congested when its density is strictly above this level (%).
CONGESTION_THRESHOLD: int = 80


class TrafficRegError(Exception):
    """Base class for every error raised by the trafficreg package."""


def is_congested(density: int) -> bool:
    """Return ``True`` when ``density`` exceeds ``CONGESTION_THRESHOLD``.

    Args:
        density: Congestion level in percent (not range-checked).

    Returns:
        Congestion flag.
    """
    return density > CONGESTION_THRESHOLD


@dataclass
class SignalRecord:
    """One registered traffic signal.

    ``congested`` is a read-only property computed from ``density`` on every
    access, so it has no independent mutation path.

    Attributes:
        id:       Signal identifier, unique within a store.
        location: Free-text, single-line location description.
        density:  Congestion level, nominally 0-100 (%).
        timing:   Green-light duration in seconds.
    """

    id: int
    location: str
    density: int
    timing: int

    @property
    def congested(self) -> bool:
        return is_congested(self.density)

    def to_dict(self) -> Dict[str, Any]:
        """Return the record fields plus the derived ``congested`` flag."""
        row = asdict(self)
        row["congested"] = self.congested
        return row


def format_record(record: SignalRecord) -> str:
    """Render a record as the one-line operator listing.

    Args:
        record: Record to display.

    Returns:
        e.g. ``Signal ID: 1 | Location: Main St | Traffic Density: 50% |
        Green Light: 30s | Status: Normal``
    """
    status = "Congested 🔴" if record.congested else "Normal 🟢"
    return (
        f"Signal ID: {record.id} | Location: {record.location}"
        f" | Traffic Density: {record.density}%"
        f" | Green Light: {record.timing}s"
        f" | Status: {status}"
    )
