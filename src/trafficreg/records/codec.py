"""
Backing-File Line Codec (Functional Core)

Encodes ``SignalRecord`` objects as one text line each and decodes them
back.  The on-disk layout is::

    <id>,<location>,<density>,<timing>,<congested 0|1>

Fields are written with the standard ``csv`` dialect and minimal quoting,
so a plain location produces exactly the comma-joined layout above while a
location containing a comma, double quote or line break is quoted and
survives a reload (a quoted line break makes one record span two physical
lines).  Bytes that are not valid UTF-8 make only their own line malformed.
Files written by older tools (bare comma-joined text) decode unchanged.

The stored ``congested`` column is validated but otherwise ignored on
decode: the flag is always recomputed from ``density``.

Package Location: src/trafficreg/records/codec.py
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Iterator, List, Tuple

from .models import SignalRecord, TrafficRegError

FIELD_COUNT: int = 5

_FLAG_VALUES = {"0": False, "1": True}


class MalformedRecordError(TrafficRegError):
    """A backing-file line could not be parsed into a full record."""

    def __init__(self, message: str, line_number: int = 0, line: str = ""):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def encode_line(record: SignalRecord) -> str:
    """Encode one record as a line of text (no trailing newline).

    Args:
        record: Record to encode.

    Returns:
        Encoded line, e.g. ``'1,Main St,50,30,0'``.
    """
    buf = io.StringIO()
    # CR and LF in a field are only quoted when they appear in the terminator.
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow([
        record.id,
        record.location,
        record.density,
        record.timing,
        int(record.congested),
    ])
    return buf.getvalue()[:-2]


def encode_records(records: Iterable[SignalRecord]) -> str:
    """Encode a sequence of records as file content, one line per record."""
    return "".join(encode_line(r) + "\n" for r in records)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def _check_encoding(text: str, line_number: int) -> None:
    # Files are read with errors="surrogateescape"; undecodable bytes show
    # up as lone surrogates that cannot be re-encoded.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MalformedRecordError(
            f"Line is not valid UTF-8: {exc.reason}", line_number, text
        ) from exc


def _build_record(
    fields: List[str], line_number: int, text: str
) -> SignalRecord:
    if len(fields) != FIELD_COUNT:
        raise MalformedRecordError(
            f"Expected {FIELD_COUNT} fields, found {len(fields)}",
            line_number,
            text,
        )

    raw_id, location, raw_density, raw_timing, raw_flag = fields
    try:
        signal_id = int(raw_id)
        density   = int(raw_density)
        timing    = int(raw_timing)
    except ValueError as exc:
        raise MalformedRecordError(
            f"Non-integer field: {exc}", line_number, text
        ) from exc

    if raw_flag.strip() not in _FLAG_VALUES:
        raise MalformedRecordError(
            f"Congestion flag must be 0 or 1, got {raw_flag!r}",
            line_number,
            text,
        )

    return SignalRecord(
        id=signal_id, location=location, density=density, timing=timing
    )


def _is_blank(fields: List[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0].strip())


def decode_line(line: str, line_number: int = 0) -> SignalRecord:
    """Parse one physical backing-file line into a ``SignalRecord``.

    Args:
        line:        Raw line, with or without its line terminator.
        line_number: 1-based position in the file, carried on errors.

    Returns:
        Decoded record.

    Raises:
        MalformedRecordError: Undecodable bytes, wrong field count, a
            non-integer numeric field, or a congestion flag other than
            ``0``/``1``.
    """
    text = line.rstrip("\r\n")
    _check_encoding(text, line_number)
    try:
        fields = next(csv.reader([text]), [])
    except csv.Error as exc:
        raise MalformedRecordError(
            f"Unparseable line: {exc}", line_number, text
        ) from exc
    return _build_record(fields, line_number, text)


def decode_lines(
    lines: Iterable[str],
) -> Tuple[List[SignalRecord], List[MalformedRecordError]]:
    """Decode file content, separating good and bad records.

    Rows are read with ``csv.reader`` over the whole input, so a quoted
    location holding a line break spans several physical lines and still
    decodes.  When such a multi-line row turns out malformed (typically a
    stray opening quote in a legacy file), its physical lines are decoded
    one by one instead, so good lines it swallowed are not lost.

    Records keep file order.  Blank lines are neither records nor errors.
    No duplicate-id check is made.

    Args:
        lines: Any iterable of text lines (a file opened with
               ``newline=""`` works).

    Returns:
        ``(records, errors)``; error line numbers are 1-based physical
        line positions.
    """
    records: List[SignalRecord] = []
    errors: List[MalformedRecordError] = []
    consumed: List[str] = []

    def _feed() -> Iterator[str]:
        for raw in lines:
            consumed.append(raw)
            yield raw

    reader = csv.reader(_feed())
    while True:
        start = reader.line_num + 1
        consumed.clear()
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            fields = None
            failure = MalformedRecordError(
                f"Unparseable line: {exc}", start, "".join(consumed)
            )
        else:
            failure = None

        text = "".join(consumed).rstrip("\r\n")
        if fields is not None:
            if _is_blank(fields) and len(consumed) <= 1:
                continue
            try:
                _check_encoding(text, start)
                records.append(_build_record(fields, start, text))
                continue
            except MalformedRecordError as exc:
                failure = exc

        if len(consumed) <= 1:
            errors.append(failure)
            continue
        for offset, raw in enumerate(list(consumed)):
            if not raw.strip():
                continue
            try:
                records.append(decode_line(raw, start + offset))
            except MalformedRecordError as exc:
                errors.append(exc)

    return records, errors
