"""
Tabular Views of Signal Records (Functional Core)

Turns record sequences into pandas DataFrames for listing, summary
statistics, and CSV export.

Package Location: src/trafficreg/records/frames.py
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List

import pandas as pd

from .models import SignalRecord

COLUMNS: List[str] = ["id", "location", "density", "timing", "congested"]


def records_to_frame(records: Iterable[SignalRecord]) -> pd.DataFrame:
    """Build a DataFrame with one row per record, in the given order.

    Args:
        records: Records to tabulate.

    Returns:
        DataFrame with columns ``COLUMNS``; empty (but with those columns)
        when ``records`` is empty.
    """
    rows = [r.to_dict() for r in records]
    if not rows:
        return pd.DataFrame({
            "id":        pd.Series(dtype="int64"),
            "location":  pd.Series(dtype="object"),
            "density":   pd.Series(dtype="int64"),
            "timing":    pd.Series(dtype="int64"),
            "congested": pd.Series(dtype="bool"),
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def summarize(records: Iterable[SignalRecord]) -> Dict[str, Any]:
    """Compute headline statistics for a record collection.

    Args:
        records: Records to summarise.

    Returns:
        Dict with ``total``, ``congested`` (count), ``mean_density`` and
        ``mean_timing``.  Means are ``None`` for an empty collection.
    """
    df = records_to_frame(records)
    if df.empty:
        return {
            "total": 0,
            "congested": 0,
            "mean_density": None,
            "mean_timing": None,
        }

    def _mean(col: str) -> float:
        return round(float(df[col].mean()), 2)

    return {
        "total": int(len(df)),
        "congested": int(df["congested"].sum()),
        "mean_density": _mean("density"),
        "mean_timing": _mean("timing"),
    }


def export_csv(records: Iterable[SignalRecord], path: Path) -> int:
    """Write records as a headed CSV table.

    Args:
        records: Records to export.
        path:    Destination file (overwritten).

    Returns:
        Number of rows written.
    """
    df = records_to_frame(records)
    df.to_csv(Path(path), index=False)
    return len(df)
