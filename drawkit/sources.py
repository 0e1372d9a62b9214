"""Index-addressable record sources consumed by :class:`UniqueFileSampler`."""

from __future__ import annotations

import csv
import logging
import os
from array import array
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .errors import SourceUnavailableError

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute

logger = logging.getLogger(__name__)


@runtime_checkable
class RecordSource(Protocol):
    """Collection of identifiers addressed by zero-based index."""

    def count(self) -> int:
        """Return the number of addressable records."""
        ...

    def record_at(self, index: int) -> Optional[str]:
        """Return the identifier at ``index``, or ``None`` if it is blank."""
        ...


class FileRecordSource:
    """Delimited text file where line ``i`` holds record ``i``.

    The identifier is the first field of each row. Lines are located through
    a byte-offset index built by one streaming pass, so the record text is
    never held in memory as a whole. The index itself costs eight bytes per
    line, so it grows linearly with the number of records.

    The default ``utf-8-sig`` encoding drops the byte-order mark that
    spreadsheet exports put in front of the first record.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike],
        delimiter: Optional[str] = None,
        encoding: str = "utf-8-sig",
    ) -> None:
        self.path = Path(path)
        if not self.path.is_file() or not os.access(self.path, os.R_OK):
            raise SourceUnavailableError(f"File not found or not readable: {self.path}")
        self.delimiter = delimiter or config.DEFAULT_CSV_DELIMITER
        self.encoding = encoding
        self._offsets: Optional[array] = None

    def _line_offsets(self) -> array:
        if self._offsets is None:
            offsets = array("Q", [0])
            position = 0
            try:
                with self.path.open("rb") as fh:
                    for line in fh:
                        position += len(line)
                        offsets.append(position)
            except OSError as exc:
                raise SourceUnavailableError(
                    f"Error retrieving line count for file: {self.path}"
                ) from exc
            # The final offset is the end of the file, not the start of a line.
            offsets.pop()
            self._offsets = offsets
            logger.debug("Indexed %d line(s) in %s", len(offsets), self.path)
        return self._offsets

    def count(self) -> int:
        return len(self._line_offsets())

    def record_at(self, index: int) -> Optional[str]:
        offsets = self._line_offsets()
        if not 0 <= index < len(offsets):
            return None
        try:
            with self.path.open("rb") as fh:
                fh.seek(offsets[index])
                raw = fh.readline()
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {self.path}") from exc

        text = raw.decode(self.encoding, errors="replace").rstrip("\r\n")
        row = next(csv.reader([text], delimiter=self.delimiter), [])
        if not row:
            return None
        identifier = row[0].strip()
        return identifier or None


class SqlRecordSource:
    """Records stored in a database column, addressed by row position.

    Rows are ordered by ``order_by`` (the participant primary key by
    default) and fetched one at a time with ``OFFSET``.
    """

    def __init__(
        self,
        session: Session,
        column: Optional["InstrumentedAttribute[Any]"] = None,
        order_by: Optional[Any] = None,
    ) -> None:
        """Create a database-backed source.

        Parameters
        ----------
        session : Session
            Active SQLAlchemy session used for the queries.
        column : Optional[InstrumentedAttribute], default: None
            Mapped column holding the identifiers. Defaults to
            :attr:`Participant.identifier`.
        order_by : Optional[Any], default: None
            Ordering that fixes each row's index. Defaults to
            :attr:`Participant.id` for the default column and to ``column``
            itself otherwise.
        """
        if column is None:
            from .models import Participant

            column = Participant.identifier
            order_by = order_by if order_by is not None else Participant.id

        self._session = session
        self._column = column
        self._order_by = order_by if order_by is not None else column

    def count(self) -> int:
        stmt = select(func.count()).select_from(select(self._column).subquery())
        try:
            return int(self._session.scalar(stmt) or 0)
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(f"Cannot count records: {exc}") from exc

    def record_at(self, index: int) -> Optional[str]:
        if index < 0:
            return None
        stmt = select(self._column).order_by(self._order_by).offset(index).limit(1)
        try:
            value = self._session.scalar(stmt)
        except SQLAlchemyError as exc:
            raise SourceUnavailableError(f"Cannot read record {index}: {exc}") from exc
        if value is None:
            return None
        return str(value).strip() or None


__all__ = ["FileRecordSource", "RecordSource", "SqlRecordSource"]
