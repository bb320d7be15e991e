"""
Module for deduplicating sequence identities and keying unordered identity pairs.
"""
from typing import NamedTuple, Iterable, Iterator, Union


# Functions ------------------------------------------------------------------------------------------------------------
def strip_name(name: bytes) -> bytes:
    """
    Derives an identity from a raw sequence name by truncating at the first '.'.

    Examples:
        >>> strip_name(b'hg38.chr1')
        b'hg38'
        >>> strip_name(b'panTro4')
        b'panTro4'
    """
    return name.partition(b'.')[0]


# Classes --------------------------------------------------------------------------------------------------------------
class PairKey(NamedTuple):
    """
    Canonical key of an unordered pair of distinct identities.

    Always build keys with :meth:`PairKey.of` so that (A, B) and (B, A) map to the same key.
    """
    first: bytes
    second: bytes

    @classmethod
    def of(cls, a: bytes, b: bytes) -> 'PairKey':
        """
        Builds the canonical key for two identities.

        Args:
            a: First identity.
            b: Second identity.

        Returns:
            The lexicographically ordered PairKey.

        Raises:
            ValueError: If both identities are equal.
        """
        if a == b: raise ValueError(f'A pair key needs two distinct identities, got {a!r} twice')
        return cls(a, b) if a < b else cls(b, a)


class IdentityRegistry:
    """
    Deduplicates identities and remembers the order in which they were first seen.

    One registry is owned by each conversion run; nothing is shared between streams.

    Examples:
        >>> registry = IdentityRegistry()
        >>> registry.add(b'mm10.chr2')
        b'mm10'
        >>> registry.add(b'hg38.chr1'), registry.add(b'mm10.chr7')
        (b'hg38', b'mm10')
        >>> registry.identities
        (b'mm10', b'hg38')
    """
    __slots__ = ('_index',)
    def __init__(self, names: Iterable[bytes] = ()):
        self._index: dict[bytes, int] = {}
        for name in names: self.add(name)

    def __len__(self) -> int: return len(self._index)
    def __iter__(self) -> Iterator[bytes]: return iter(self._index)
    def __contains__(self, item: bytes) -> bool: return item in self._index
    def __repr__(self) -> str: return f"IdentityRegistry({len(self)} identities)"

    @property
    def identities(self) -> tuple[bytes, ...]:
        """The identities in first-seen order."""
        return tuple(self._index)

    def add(self, name: Union[bytes, str]) -> bytes:
        """
        Registers a raw sequence name and returns its canonical identity.

        Args:
            name: Raw sequence name, e.g. ``b'hg38.chr1'``.

        Returns:
            The stripped identity.
        """
        if isinstance(name, str): name = name.encode('ascii')
        identity = strip_name(name)
        self._index.setdefault(identity, len(self._index))
        return identity

    def index(self, identity: bytes) -> int:
        """Returns the first-seen index of an identity."""
        try: return self._index[identity]
        except KeyError: raise KeyError(f'Unknown identity: {identity!r}') from None
