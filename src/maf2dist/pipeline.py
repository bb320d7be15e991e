"""
Conversion of one alignment stream into one distance matrix.
"""
from typing import BinaryIO, Union

from maf2dist.core.identity import IdentityRegistry
from maf2dist.engines.columns import core_columns
from maf2dist.engines.compare import Comparator, Strategy
from maf2dist.engines.matrix import DistanceMatrix, accumulate
from maf2dist.io.maf import MafReader


# Functions ------------------------------------------------------------------------------------------------------------
def convert(handle: BinaryIO, core: bool = False, comparator: Union[Comparator, str, Strategy] = None,
            threads: int = 1) -> DistanceMatrix:
    """
    Reads a MAF stream and accumulates its pairwise distance matrix.

    Every call owns a fresh :class:`IdentityRegistry`; nothing carries over between streams.

    Args:
        handle: Binary handle of the MAF stream.
        core: Only use blocks covering every identity and skip columns with a gap in any sequence.
        comparator: A Comparator or the name of a comparison strategy.
        threads: Number of concurrent block tasks.

    Returns:
        The DistanceMatrix, whose ``identities`` are in first-seen order.

    Raises:
        FormatError: If the stream is not valid MAF or a block holds sequences of different lengths.

    Examples:
        >>> with open("alignment.maf", "rb") as f:
        ...     matrix = convert(f, core=True)
        >>> matrix.to_array()
    """
    if not isinstance(comparator, Comparator): comparator = Comparator(comparator or Strategy.AUTO)
    registry = IdentityRegistry()
    blocks = MafReader(handle, registry=registry)
    if core: blocks = core_columns(blocks)
    return accumulate(blocks, comparator, registry=registry, threads=threads)
