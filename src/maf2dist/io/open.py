"""
Opening of input and output streams, with transparent decompression of alignment files.
"""
from io import IOBase
from importlib import import_module
from pathlib import Path
from typing import Union, BinaryIO, Optional
import lzma
import sys
import zlib

from maf2dist import Maf2distError


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class CompressionError(Maf2distError, OSError):
    """Raised when a compressed stream cannot be decoded, e.g. because its module is not installed."""


# Errors raised while decompressing a corrupt or truncated stream (gzip and bzip2 raise EOFError when truncated)
DECOMPRESSION_ERRORS = (EOFError, zlib.error, lzma.LZMAError)


# Classes --------------------------------------------------------------------------------------------------------------
class PeekableHandle:
    """
    Keeps the first bytes of a non-seekable stream (a pipe or standard input) so they can be inspected for a
    compression signature and then read again.
    """
    __slots__ = ('_stream', '_head')
    def __init__(self, stream: BinaryIO, size: int = 4096):
        self._stream = stream
        self._head = stream.read(size)

    def peek(self, size: int) -> bytes: return self._head[:size]
    def readable(self) -> bool: return True
    def close(self): self._stream.close()

    def read(self, size: int = -1) -> bytes:
        head = self._head
        if not head: return self._stream.read(size)
        if size is None or size < 0:
            self._head = b''
            return head + self._stream.read()
        self._head = head[size:]
        if len(head) >= size: return head[:size]
        return head + self._stream.read(size - len(head))

    def __iter__(self):
        head, self._head = self._head, b''
        if head:
            lines = head.splitlines(keepends=True)
            yield from lines[:-1]
            last = lines[-1]
            yield last if last.endswith(b'\n') else last + self._stream.readline()  # Line continues in the stream
        yield from self._stream


class Xopen:
    """
    Context manager opening a path, ``'-'`` or an open binary handle.

    When reading, gzip, bzip2, xz and zstandard input is recognised from its magic bytes and decompressed on
    the fly. Writing to ``'-'`` goes to standard output.

    Examples:
        >>> with Xopen("alignment.maf.gz") as f:
        ...     header = f.readline()
    """
    _MAGIC = {
        b'\x1f\x8b': 'gzip',
        b'BZh': 'bz2',
        b'\xfd7zXZ\x00': 'lzma',
        b'\x28\xb5\x2f\xfd': 'zstandard'
    }
    _N_MAGIC = max(map(len, _MAGIC))
    __slots__ = ('file', 'mode', '_handle', '_raw')
    def __init__(self, file: Union[str, Path, BinaryIO], mode: str = 'rb'):
        """
        Args:
            file: A path, '-' for the standard streams, or an open binary handle (never closed here).
            mode: 'rb' or 'wb'.
        """
        self.file = file
        self.mode = mode
        self._handle: Optional[BinaryIO] = None  # What we opened and must close
        self._raw: Optional[BinaryIO] = None  # File underneath a decompressor

    def __enter__(self) -> BinaryIO:
        """
        Raises:
            OSError: If the file cannot be opened.
            CompressionError: If the stream is compressed with a format whose module is not installed.
        """
        writing = 'w' in self.mode
        if isinstance(self.file, (IOBase, PeekableHandle)): stream = self.file
        elif str(self.file) == '-': stream = sys.stdout.buffer if writing else sys.stdin.buffer
        else: stream = self._raw = open(Path(self.file).expanduser(), 'wb' if writing else 'rb')
        if writing: return stream
        if not self._seekable(stream): stream = PeekableHandle(stream)
        return self._decompress(stream, self._sniff(stream))

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._handle is not None: self._handle.close()
        if self._raw is not None: self._raw.close()

    @staticmethod
    def _seekable(stream) -> bool:
        try: return stream.seekable()
        except (AttributeError, ValueError): return False

    def _sniff(self, stream) -> bytes:
        if isinstance(stream, PeekableHandle): return stream.peek(self._N_MAGIC)
        start = stream.read(self._N_MAGIC)
        stream.seek(-len(start), 1)
        return start

    def _decompress(self, stream, start: bytes) -> BinaryIO:
        module = next((m for magic, m in self._MAGIC.items() if start.startswith(magic)), None)
        if module is None: return stream
        try: opener = import_module(module).open
        except ImportError:
            raise CompressionError(f'input is {module} compressed but the {module} module is not installed') from None
        self._handle = opener(stream, mode='rb')
        return self._handle
