"""
Module for reading alignment streams and writing distance matrices.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union, Generator, BinaryIO

from maf2dist import FormatError, Maf2distWarning
from maf2dist.io.open import Xopen


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class MafFormatError(FormatError):
    """Raised when the structure of a MAF stream (header, block or record lines) is malformed."""
    def __init__(self, message: str, line_number: int = None):
        self.line_number = line_number
        super().__init__(f'line {line_number}: {message}' if line_number is not None else message)

class MafWarning(Maf2distWarning):
    """Issued when a MAF stream is only partially consumed."""


# Classes --------------------------------------------------------------------------------------------------------------
class BaseReader(ABC):
    """Abstract base class for alignment file readers."""
    __slots__ = ('_handle',)
    def __init__(self, handle: BinaryIO, **kwargs):
        """
        Initializes the reader.

        Args:
            handle: The open binary handle to read from.
            **kwargs: Additional arguments.
        """
        self._handle = handle

    @classmethod
    @abstractmethod
    def sniff(cls, s: bytes) -> bool: ...
    @abstractmethod
    def __iter__(self) -> Generator: ...


class BaseWriter(ABC):
    """
    Abstract base class for writers.

    Examples:
        >>> with PhylipWriter("-") as w:
        ...     w.write(matrix)
    """
    __slots__ = ('_opener', '_handle')
    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'wb'):
        self._opener = Xopen(file, mode=mode)
        self._handle = None

    def __enter__(self):
        self._handle = self._opener.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._handle is not None and hasattr(self._handle, 'flush'): self._handle.flush()
        self._opener.__exit__(exc_type, exc_val, exc_tb)

    def write(self, *items):
        """Writes each item in turn."""
        for item in items: self.write_one(item)

    @abstractmethod
    def write_one(self, item):
        """
        Writes a single item.

        Args:
            item: The object to write.
        """
        pass


from maf2dist.io.maf import MafReader
from maf2dist.io.matrix import PhylipWriter
