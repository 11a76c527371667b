"""
trafficreg Records Package (Functional Core)

Pure data structures and transformations with no file or console I/O.

Modules:
- models: SignalRecord, congestion threshold, display formatting
- codec:  One-record-per-line text encoding of the backing file
- frames: pandas DataFrame views and summary statistics
"""

from .models import (
    CONGESTION_THRESHOLD,
    TrafficRegError,
    SignalRecord,
    is_congested,
    format_record,
)

from .codec import (
    MalformedRecordError,
    FIELD_COUNT,
    encode_line,
    encode_records,
    decode_line,
    decode_lines,
)

from .frames import (
    COLUMNS,
    records_to_frame,
    summarize,
    export_csv,
)

__all__ = [
    # Models
    'CONGESTION_THRESHOLD',
    'TrafficRegError',
    'SignalRecord',
    'is_congested',
    'format_record',
    # Codec
    'MalformedRecordError',
    'FIELD_COUNT',
    'encode_line',
    'encode_records',
    'decode_line',
    'decode_lines',
    # Frames
    'COLUMNS',
    'records_to_frame',
    'summarize',
    'export_csv',
]
