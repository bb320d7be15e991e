"""
Containers for alignment blocks and their sequence records.
"""
from typing import NamedTuple, Iterable, Iterator, Final

import numpy as np

from maf2dist import FormatError


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class UnequalLengthError(FormatError):
    """Raised when aligned sequences that must be compared position by position differ in length."""


# Constants ------------------------------------------------------------------------------------------------------------
GAP: Final = ord('-')


# Classes --------------------------------------------------------------------------------------------------------------
class SequenceRecord(NamedTuple):
    """One aligned sequence of a block, reduced to the fields used for distances."""
    identity: bytes
    seq: bytes


class Block:
    """
    An ordered group of aligned sequence records.

    The reader does not check that the records are equally long; :attr:`encoded` does, because it is the
    input handed to the comparator.

    Examples:
        >>> block = Block([SequenceRecord(b'hg38', b'AC-T'), SequenceRecord(b'mm10', b'ACG-')])
        >>> sorted(block.identities)
        [b'hg38', b'mm10']
        >>> block.encoded.shape
        (2, 4)
    """
    __slots__ = ('_records', '_encoded')
    def __init__(self, records: Iterable[SequenceRecord] = ()):
        self._records: tuple[SequenceRecord, ...] = tuple(records)
        self._encoded = None

    def __len__(self) -> int: return len(self._records)
    def __iter__(self) -> Iterator[SequenceRecord]: return iter(self._records)
    def __getitem__(self, item) -> SequenceRecord: return self._records[item]
    def __repr__(self) -> str: return f"Block({len(self)} records, {self.width} columns)"
    def __eq__(self, other):
        if not isinstance(other, Block): return NotImplemented
        return self._records == other._records

    @property
    def names(self) -> tuple[bytes, ...]:
        """Identities of the records, in block order (may repeat)."""
        return tuple(r.identity for r in self._records)

    @property
    def identities(self) -> frozenset[bytes]:
        """The set of identities present in this block."""
        return frozenset(r.identity for r in self._records)

    @property
    def width(self) -> int:
        """Number of alignment columns (the length of the first record)."""
        return len(self._records[0].seq) if self._records else 0

    @property
    def encoded(self) -> np.ndarray:
        """
        The records as a read-only ``(n_records, width)`` uint8 matrix.

        Raises:
            UnequalLengthError: If the records are not all the same length.
        """
        if self._encoded is None:
            width = self.width
            for record in self._records:
                if len(record.seq) != width:
                    label = record.identity.decode(errors='replace')
                    raise UnequalLengthError(
                        f'Sequence of {label!r} has length {len(record.seq)}, expected {width} like the rest of the block'
                    )
            data = np.frombuffer(b''.join(r.seq for r in self._records), dtype=np.uint8)
            self._encoded = data.reshape(len(self._records), width)
        return self._encoded

    def gapped_columns(self) -> np.ndarray:
        """Boolean mask of the columns that hold a gap in at least one record."""
        return np.any(self.encoded == GAP, axis=0)

    def mask_columns(self, mask: np.ndarray) -> 'Block':
        """
        Returns a new block where the masked columns are overwritten with gaps in every record.

        Args:
            mask: Boolean array of length :attr:`width`.

        Returns:
            A Block of the same shape.
        """
        data = self.encoded.copy()
        data[:, mask] = GAP
        return Block(SequenceRecord(r.identity, row.tobytes()) for r, row in zip(self._records, data))
