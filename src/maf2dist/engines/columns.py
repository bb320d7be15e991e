"""
Core-columns (complete deletion) filtering of alignment blocks.
"""
from typing import Iterable

from maf2dist.containers.block import Block


# Functions ------------------------------------------------------------------------------------------------------------
def full_identity_set(blocks: Iterable[Block]) -> frozenset[bytes]:
    """Union of the identities of all blocks."""
    identities = set()
    for block in blocks: identities.update(block.identities)
    return frozenset(identities)


def mask_gapped_columns(block: Block) -> Block:
    """Overwrites every column holding a gap in any record with gaps in all records."""
    mask = block.gapped_columns()
    return block.mask_columns(mask) if mask.any() else block


def core_columns(blocks: Iterable[Block]) -> list[Block]:
    """
    Keeps only the blocks covering every identity of the stream and masks their gapped columns.

    All blocks are buffered because the full identity set is only known once the stream has been read.
    A block whose identity set differs from the full set is dropped entirely.

    Args:
        blocks: The blocks of one stream.

    Returns:
        The retained blocks, in stream order, with gapped columns masked.

    Raises:
        UnequalLengthError: If a retained block's records differ in length.

    Examples:
        >>> kept = core_columns(MafReader(handle))
    """
    blocks = list(blocks)
    identities = full_identity_set(blocks)
    return [mask_gapped_columns(block) for block in blocks if block.identities == identities]
