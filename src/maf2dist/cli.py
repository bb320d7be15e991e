"""
Command-line interface: one distance matrix per input file.
"""
import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter, Namespace
from dataclasses import dataclass
from math import inf
from typing import Optional, Sequence

from maf2dist import FormatError, __version__
from maf2dist.engines.compare import Comparator, Strategy
from maf2dist.io import PhylipWriter
from maf2dist.io.open import Xopen, DECOMPRESSION_ERRORS
from maf2dist.pipeline import convert
from maf2dist.utils import Config


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass
class RunConfig(Config):
    """Settings shared by every input file of one run."""
    core: bool = False
    threads: int = 1
    strategy: str = Strategy.AUTO.value
    saturated: float = inf


# Functions ------------------------------------------------------------------------------------------------------------
def parse_args(argv: Optional[Sequence[str]] = None) -> tuple[ArgumentParser, Namespace]:
    parser = ArgumentParser(
        prog='maf2dist', formatter_class=RawDescriptionHelpFormatter,
        description='Compute a distance matrix from an alignment.',
        epilog='With no FILE, or when FILE is -, read standard input.'
    )
    parser.add_argument('files', nargs='*', metavar='FILE', help='MAF file(s), optionally compressed')
    parser.add_argument('-c', '--core', '--complete-deletion', action='store_true', dest='core',
                        help='Delete complete columns with gaps')
    parser.add_argument('-t', '--threads', type=int, default=1, metavar='N',
                        help='Number of blocks processed concurrently (default: %(default)s)')
    parser.add_argument('--strategy', choices=[s.value for s in Strategy], default=Strategy.AUTO.value,
                        help='Sequence comparison strategy (default: %(default)s)')
    parser.add_argument('--saturated', type=float, default=inf, metavar='X',
                        help='Distance reported when the mismatch fraction reaches 0.75 (default: %(default)s)')
    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser, parser.parse_args(argv)


def run(files: Sequence[str], config: RunConfig) -> int:
    """
    Converts each file in turn and writes its matrix to standard output.

    Returns:
        The exit status.
    """
    comparator = Comparator(config.strategy)
    with PhylipWriter('-', saturated=config.saturated) as writer:
        for file in files:
            try:
                with Xopen(file) as handle:
                    matrix = convert(handle, core=config.core, comparator=comparator, threads=config.threads)
            except OSError as e:
                print(f'maf2dist: {file}: {e.strerror or e}', file=sys.stderr)
                return e.errno or 1
            except FormatError as e:
                print(f'maf2dist: {file}: {e}', file=sys.stderr)
                return 1
            except DECOMPRESSION_ERRORS as e:
                print(f'maf2dist: {file}: corrupt or truncated compressed input: {e}', file=sys.stderr)
                return 1
            writer.write(matrix)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser, args = parse_args(argv)
    if args.threads < 1: parser.error('--threads must be at least 1')
    files = args.files
    if not files:
        if sys.stdin.isatty():  # Nothing piped in: show how to use the tool instead of waiting
            parser.print_usage(sys.stderr)
            return 1
        files = ['-']
    return run(files, RunConfig.from_args(args))


if __name__ == '__main__':
    sys.exit(main())
