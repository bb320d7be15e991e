"""
Writer for square distance matrices in the PHYLIP layout.
"""
from math import inf
from pathlib import Path
from typing import Union, BinaryIO

from maf2dist.engines.matrix import DistanceMatrix
from maf2dist.io import BaseWriter


# Classes --------------------------------------------------------------------------------------------------------------
class PhylipWriter(BaseWriter):
    """
    Writes a :class:`DistanceMatrix` as its identity count followed by one row per identity.

    Each row holds the identity left-justified to `name_width` columns and the distance to every identity, in the
    same order, formatted as ``%1.4e``.

    Examples:
        >>> with PhylipWriter("-") as w:
        ...     w.write(matrix)
        2
        hg38       0.0000e+00 3.0410e-01
        mm10       3.0410e-01 0.0000e+00
    """
    __slots__ = ('name_width', 'saturated')
    def __init__(self, file: Union[str, Path, BinaryIO], name_width: int = 10, saturated: float = inf, **kwargs):
        """
        Args:
            file: File path, '-' for standard output, or a binary handle.
            name_width: Minimum width of the identity column.
            saturated: Value written for saturated pairs.
        """
        super().__init__(file, **kwargs)
        self.name_width = name_width
        self.saturated = saturated

    def write_one(self, matrix: DistanceMatrix):
        """
        Writes one matrix.

        Args:
            matrix: The DistanceMatrix to write.
        """
        if not isinstance(matrix, DistanceMatrix): raise TypeError("PhylipWriter expects DistanceMatrix objects")
        identities = matrix.identities
        values = matrix.to_array(self.saturated)
        lines = [b'%d' % len(identities)]
        for identity, row in zip(identities, values):
            cells = ''.join(f' {value:1.4e}' for value in row)
            lines.append(identity.ljust(self.name_width) + cells.encode('ascii'))
        self._handle.write(b'\n'.join(lines) + b'\n')
