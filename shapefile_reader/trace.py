from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .entities import InfoRecord


def log_omitted_fields(records: Sequence[InfoRecord], field_names: Sequence[str], destination: Path) -> int:
    """Write one line per record that lost cells during decoding; returns the line count."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    lines: List[str] = []
    for ordinal, record in enumerate(records):
        missing = [name for name in field_names if name not in record]
        if missing:
            lines.append(f"#{ordinal:06d} missing={','.join(missing)}")
    destination.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
    return len(lines)


@dataclass
class RecordTraceLogger:
    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    def record(
        self,
        *,
        ordinal: int,
        offset: int,
        next_offset: int,
        kind: Optional[str],
        note: str | None = None,
    ) -> None:
        line = (
            f"#{ordinal:06d} off=0x{offset:08X} next=0x{next_offset:08X} "
            f"len={next_offset - offset:<8d} kind={kind or 'NULL'}"
        )
        if note:
            line += f" | {note}"
        self._lines.append(line)

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        self.destination.write_text("\n".join(self._lines) + "\n", encoding="utf-8")
