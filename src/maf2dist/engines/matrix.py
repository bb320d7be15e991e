"""
Accumulation of pairwise statistics into a symmetric distance matrix.

Each block yields an independent partial matrix; partial matrices are merged with an associative and commutative
``+``, so blocks can be reduced in any order or grouping, including on a thread pool.
"""
from collections import deque
from functools import reduce
from operator import iadd
from math import isinf
from typing import Iterable, Iterator
from warnings import warn

import numpy as np
from scipy.spatial.distance import squareform

from maf2dist import DistanceWarning
from maf2dist.containers.block import Block
from maf2dist.core.identity import IdentityRegistry, PairKey
from maf2dist.engines.compare import ComparisonStat, Comparator
from maf2dist.engines.distance import distance, is_saturated, SATURATED
from maf2dist.utils.resources import RESOURCES


# Classes --------------------------------------------------------------------------------------------------------------
class DistanceMatrix:
    """
    Maps unordered identity pairs to accumulated :class:`ComparisonStat`.

    The matrix optionally carries the :class:`IdentityRegistry` of its run, which fixes the identity order used
    for emission. Pairs never compared, and an identity paired with itself, read as :attr:`ComparisonStat.ZERO`.

    Examples:
        >>> m = DistanceMatrix()
        >>> m.add(b'hg38', b'mm10', ComparisonStat(4, 1))
        >>> m[b'mm10', b'hg38']
        ComparisonStat(compared=4, mismatches=1)
        >>> round(m.distance(b'hg38', b'mm10'), 4)
        0.3041
    """
    __slots__ = ('_stats', '_registry')
    def __init__(self, stats: dict[PairKey, ComparisonStat] = None, registry: IdentityRegistry = None):
        self._stats: dict[PairKey, ComparisonStat] = dict(stats) if stats else {}
        self._registry = registry

    def __len__(self) -> int: return len(self._stats)
    def __iter__(self) -> Iterator[PairKey]: return iter(self._stats)
    def __contains__(self, item) -> bool:
        a, b = item
        return a != b and PairKey.of(a, b) in self._stats
    def __repr__(self) -> str: return f"DistanceMatrix({len(self.identities)} identities, {len(self)} pairs)"
    def __eq__(self, other):
        if not isinstance(other, DistanceMatrix): return NotImplemented
        return self._stats == other._stats

    def __getitem__(self, item: tuple[bytes, bytes]) -> ComparisonStat:
        a, b = item
        if a == b: return ComparisonStat.ZERO  # The diagonal is never compared
        return self._stats.get(PairKey.of(a, b), ComparisonStat.ZERO)

    @property
    def identities(self) -> tuple[bytes, ...]:
        """Identities in emission order: the registry order, or sorted when no registry is attached."""
        if self._registry is not None: return self._registry.identities
        return tuple(sorted({identity for key in self._stats for identity in key}))

    def add(self, a: bytes, b: bytes, stat: ComparisonStat):
        """Combines `stat` into the entry of the pair (a, b)."""
        key = PairKey.of(a, b)
        self._stats[key] = self._stats.get(key, ComparisonStat.ZERO) + stat

    def __iadd__(self, other: 'DistanceMatrix') -> 'DistanceMatrix':
        if not isinstance(other, DistanceMatrix): return NotImplemented
        stats = self._stats
        zero = ComparisonStat.ZERO
        for key, stat in other._stats.items(): stats[key] = stats.get(key, zero) + stat
        if self._registry is None: self._registry = other._registry
        return self

    def __add__(self, other: 'DistanceMatrix') -> 'DistanceMatrix':
        if not isinstance(other, DistanceMatrix): return NotImplemented
        result = DistanceMatrix(self._stats, self._registry)
        result += other
        return result

    @classmethod
    def reduce(cls, matrices: Iterable['DistanceMatrix'], registry: IdentityRegistry = None) -> 'DistanceMatrix':
        """
        Merges any number of matrices into a new one.

        Args:
            matrices: Partial matrices, in any order.
            registry: Registry to attach to the result.

        Returns:
            The merged DistanceMatrix.
        """
        merged = reduce(iadd, matrices, cls())
        if registry is not None: merged._registry = registry
        return merged

    @classmethod
    def from_block(cls, block: Block, comparator: Comparator = None) -> 'DistanceMatrix':
        """
        Builds the partial matrix of one block from every unordered pair of its records.

        Records sharing an identity are not compared with each other.

        Args:
            block: The alignment block.
            comparator: Comparator to use, the default one if omitted.

        Returns:
            The block's partial DistanceMatrix.

        Raises:
            UnequalLengthError: If the block's records differ in length.
        """
        comparator = comparator or Comparator()
        partial = cls()
        if len(block) < 2: return partial
        names = block.names
        encoded = block.encoded
        for i in range(len(names)):
            for j in range(i):
                if names[i] == names[j]: continue
                partial.add(names[i], names[j], comparator(encoded[i], encoded[j]))
        return partial

    def distance(self, a: bytes, b: bytes, saturated: float = SATURATED) -> float:
        """Corrected distance between two identities; 0.0 for an identity with itself."""
        if a == b: return 0.0
        return distance(self[a, b], saturated)

    def to_array(self, saturated: float = SATURATED) -> np.ndarray:
        """
        Renders the square, symmetric distance matrix in :attr:`identities` order.

        Args:
            saturated: Value used for saturated pairs.

        Returns:
            A float64 array of shape (n, n) with a zero diagonal.
        """
        identities = self.identities
        n = len(identities)
        if n == 0: return np.zeros((0, 0), dtype=np.float64)
        condensed = np.zeros(n * (n - 1) // 2, dtype=np.float64)
        k = n_saturated = 0
        for i in range(n):
            for j in range(i + 1, n):
                stat = self[identities[i], identities[j]]
                if is_saturated(stat): n_saturated += 1
                condensed[k] = distance(stat, saturated)
                k += 1
        if n_saturated:
            shown = 'inf' if isinf(saturated) else f'{saturated:g}'
            warn(f'{n_saturated} pair(s) have a mismatch fraction of at least 0.75; reported as {shown}',
                 DistanceWarning)
        return squareform(condensed, checks=False)


# Functions ------------------------------------------------------------------------------------------------------------
def accumulate(blocks: Iterable[Block], comparator: Comparator = None, registry: IdentityRegistry = None,
               threads: int = 1, batch_size: int = 64) -> DistanceMatrix:
    """
    Merges the partial matrices of every block into one DistanceMatrix.

    With ``threads > 1`` batches of blocks are reduced on :attr:`RESOURCES.pool`, each task owning a private
    partial matrix; the partials are merged once all tasks are done.

    Args:
        blocks: Blocks to accumulate. Consumed once.
        comparator: Comparator to use, the default one if omitted.
        registry: Registry to attach to the result.
        threads: Number of concurrent tasks; 1 processes blocks in the calling thread.
        batch_size: Number of blocks per task when running concurrently.

    Returns:
        The stream-level DistanceMatrix.
    """
    comparator = comparator or Comparator()
    if threads is None or threads <= 1:
        matrix = DistanceMatrix(registry=registry)
        for block in blocks: matrix += DistanceMatrix.from_block(block, comparator)
        return matrix

    def task(batch: list[Block]) -> DistanceMatrix:
        return DistanceMatrix.reduce(DistanceMatrix.from_block(b, comparator) for b in batch)

    merged = DistanceMatrix(registry=registry)
    futures, pending = deque(), []
    for block in blocks:
        pending.append(block)
        if len(pending) >= batch_size:
            futures.append(RESOURCES.pool.submit(task, pending))
            pending = []
            while len(futures) > threads: merged += futures.popleft().result()  # Bound the blocks held in memory
    if pending: futures.append(RESOURCES.pool.submit(task, pending))
    for future in futures: merged += future.result()
    return merged
