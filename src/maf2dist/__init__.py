"""
Top-level module, including package-wide exceptions, warnings and the public API.

Converts multiple alignment format (MAF) streams into pairwise Jukes-Cantor distance matrices.

Examples:
    >>> from maf2dist import convert
    >>> with open("alignment.maf", "rb") as f:
    ...     matrix = convert(f, core=True)
    >>> matrix.identities
    (b'hg38', b'mm10', b'rn6')
"""
from importlib.metadata import version, PackageNotFoundError


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class Maf2distError(Exception):
    """Base class for all errors raised by maf2dist."""

class FormatError(Maf2distError, ValueError):
    """Raised when the input does not follow the alignment format closely enough to compute statistics."""

class Maf2distWarning(Warning): pass
class DependencyWarning(Maf2distWarning): pass
class DistanceWarning(Maf2distWarning): pass


# Constants ------------------------------------------------------------------------------------------------------------
try: __version__ = version(__name__)
except PackageNotFoundError: __version__ = '0.0.0'

from maf2dist.pipeline import convert
from maf2dist.core.identity import IdentityRegistry, PairKey
from maf2dist.engines.compare import ComparisonStat, Comparator, Strategy
from maf2dist.engines.matrix import DistanceMatrix
from maf2dist.engines.distance import jukes_cantor, distance

__all__ = ['convert', 'IdentityRegistry', 'PairKey', 'ComparisonStat', 'Comparator', 'Strategy', 'DistanceMatrix',
           'jukes_cantor', 'distance', 'Maf2distError', 'FormatError', 'Maf2distWarning', 'DependencyWarning',
           'DistanceWarning', '__version__']
