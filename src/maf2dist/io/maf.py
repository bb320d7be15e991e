"""
Reader for Multiple Alignment Format (MAF) streams.
"""
from enum import IntEnum
from typing import BinaryIO, Generator, Iterator, Optional
from warnings import warn

from maf2dist.containers.block import Block, SequenceRecord
from maf2dist.core.identity import IdentityRegistry
from maf2dist.io import BaseReader, MafFormatError, MafWarning


# Constants ------------------------------------------------------------------------------------------------------------
class ReaderState(IntEnum):
    """States of the MAF scanning state machine."""
    HEADER = 0
    BETWEEN_BLOCKS = 1
    IN_BLOCK_HEADER = 2
    IN_BLOCK_RECORDS = 3
    DONE = 4


# Classes --------------------------------------------------------------------------------------------------------------
class MafReader(BaseReader):
    """
    Reader for MAF files, yielding one :class:`Block` per alignment block.

    Only the ``s`` lines of a block are used: the source name (stripped at the first '.') and the aligned text.
    The stream must start with the ``##maf`` header; parsing stops at the first line between blocks that does
    not open a new ``a`` block.

    Examples:
        >>> with open("alignment.maf", "rb") as f:
        ...     for block in MafReader(f):
        ...         print(block.names)
    """
    HEADER: bytes = b'##maf'
    BLOCK_MARKER: int = ord('a')
    RECORD_MARKER: int = ord('s')
    _N_FIELDS = 7
    __slots__ = ('_registry', '_line_number')
    def __init__(self, handle: BinaryIO, registry: IdentityRegistry = None, **kwargs):
        """
        Initializes the reader.

        Args:
            handle: Binary handle positioned at the start of the stream.
            registry: Registry receiving identities in first-seen order. A new one is created if omitted.
        """
        super().__init__(handle, **kwargs)
        self._registry = IdentityRegistry() if registry is None else registry
        self._line_number = 0

    @classmethod
    def sniff(cls, s: bytes) -> bool: return s.startswith(cls.HEADER)

    def _lines(self) -> Iterator[bytes]:
        for line in self._handle:
            self._line_number += 1
            yield line.rstrip(b'\r\n')

    def __iter__(self) -> Generator[Block, None, None]:
        """
        Scans the stream and yields blocks lazily. The stream can only be consumed once.

        Yields:
            Block objects in stream order.

        Raises:
            MafFormatError: If the header is missing or a record line is malformed.
        """
        lines = self._lines()
        line: Optional[bytes] = None  # One line of lookahead, None at end of stream
        state = ReaderState.HEADER
        records = []

        while state is not ReaderState.DONE:
            if state is ReaderState.HEADER:
                line = next(lines, None)
                if line is None or not line.startswith(self.HEADER):
                    raise MafFormatError(f'stream does not start with {self.HEADER.decode()!r}', self._line_number or 1)
                line = next(lines, None)
                state = ReaderState.BETWEEN_BLOCKS

            elif state is ReaderState.BETWEEN_BLOCKS:
                while line is not None and not line.strip(): line = next(lines, None)
                if line is not None and line[0] == self.BLOCK_MARKER:
                    state = ReaderState.IN_BLOCK_HEADER
                else:
                    if line is not None:
                        warn(f'Stopped reading at line {self._line_number}: '
                             f'expected a block starting with "a", got {line[:1]!r}', MafWarning)
                    state = ReaderState.DONE

            elif state is ReaderState.IN_BLOCK_HEADER:
                line = next(lines, None)  # The rest of the "a" line carries nothing we need
                records = []
                state = ReaderState.IN_BLOCK_RECORDS

            elif state is ReaderState.IN_BLOCK_RECORDS:
                if line and line[0] == self.RECORD_MARKER:
                    records.append(self.parse_record(line))
                    line = next(lines, None)
                else:
                    yield Block(records)
                    state = ReaderState.BETWEEN_BLOCKS

    def parse_record(self, line: bytes) -> SequenceRecord:
        """
        Parses an ``s`` line.

        Args:
            line: The record line without its terminator.

        Returns:
            A SequenceRecord with the registered identity and the aligned text.

        Raises:
            MafFormatError: If the line has too few fields or a numeric field is not an integer.
        """
        parts = line.split()
        if len(parts) < self._N_FIELDS or parts[0] != b's':
            raise MafFormatError(f'expected "s src start size strand srcSize text", got {line[:60]!r}',
                                 self._line_number)
        _, name, start, size, strand, src_size, text = parts[:self._N_FIELDS]
        label = name.decode(errors="replace")
        try: int(start), int(size), int(src_size)
        except ValueError:
            raise MafFormatError(f"non-integer coordinate in record for {label!r}", self._line_number) from None
        if len(strand) != 1:
            raise MafFormatError(f"invalid strand {strand!r} in record for {label!r}", self._line_number)
        return SequenceRecord(self._registry.add(name), text)
