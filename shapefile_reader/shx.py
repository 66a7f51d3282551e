from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

from .errors import RecordIndexError
from .header import HEADER_SIZE, WORD_SIZE, measure_length, read_main_header
from .unpack import parse_layout, unpack

logger = logging.getLogger(__name__)

INDEX_RECORD_SIZE = 8
INDEX_RECORD_LAYOUT = parse_layout(">2i")


class ShxReader:
    """Ordinal -> byte offset table read from a .shx index file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._handle = self.path.open("rb")
        try:
            self._offsets = self._read_offsets()
        except BaseException:
            self._handle.close()
            raise

    def __enter__(self) -> "ShxReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._handle.close()

    def __len__(self) -> int:
        return len(self._offsets)

    @property
    def offsets(self) -> Tuple[int, ...]:
        return self._offsets

    def offset_of(self, ordinal: int) -> int:
        if not 0 <= ordinal < len(self._offsets):
            raise RecordIndexError(ordinal, len(self._offsets))
        return self._offsets[ordinal]

    def _read_offsets(self) -> Tuple[int, ...]:
        header = read_main_header(self._handle)
        count = (header.declared_length - HEADER_SIZE) // INDEX_RECORD_SIZE

        measured_count = (measure_length(self._handle) - HEADER_SIZE) // INDEX_RECORD_SIZE
        if count != measured_count:
            logger.warning(
                f"{self.path.name}: header declares {count} index record(s), "
                f"file size holds {measured_count}; using the measured count"
            )
            count = measured_count

        self._handle.seek(HEADER_SIZE)
        body = self._handle.read(count * INDEX_RECORD_SIZE)
        offsets = []
        for idx in range(count):
            chunk = body[idx * INDEX_RECORD_SIZE : (idx + 1) * INDEX_RECORD_SIZE]
            offset_words, _content_words = unpack(chunk, INDEX_RECORD_LAYOUT)
            offsets.append(offset_words * WORD_SIZE)
        return tuple(offsets)
