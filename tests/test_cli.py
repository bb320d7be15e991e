import gzip
import sys
from io import BytesIO, TextIOWrapper

import pytest
from maf2dist.cli import main, RunConfig, parse_args
from maf2dist.io import open as xopen

BLOCK = b'a score=0\ns X.1 0 4 + 9 ACGT\ns Y.1 0 4 + 9 ACGA\n\n'
MAF = b'##maf version=1\n\n' + BLOCK
MATRIX = 'X          0.0000e+00 3.0410e-01\n'


class _Terminal(TextIOWrapper):
    def isatty(self): return True


class TestCli:
    def test_file(self, tmp_path, capsys):
        path = tmp_path / 'aln.maf'
        path.write_bytes(MAF)
        assert main([str(path)]) == 0
        out = capsys.readouterr().out
        assert out.startswith('2\n')
        assert MATRIX in out

    def test_one_matrix_per_file(self, tmp_path, capsys):
        first, second = tmp_path / 'a.maf', tmp_path / 'b.maf'
        first.write_bytes(MAF)
        second.write_bytes(MAF.replace(b'Y.1', b'Z.1'))
        assert main([str(first), str(second)]) == 0
        out = capsys.readouterr().out
        assert out.count('2\n') == 2
        assert 'Y ' in out and 'Z ' in out

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'stdin', TextIOWrapper(BytesIO(MAF)))
        assert main([]) == 0
        assert MATRIX in capsys.readouterr().out

    def test_dash_is_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'stdin', TextIOWrapper(BytesIO(MAF)))
        assert main(['-c', '-']) == 0
        assert MATRIX in capsys.readouterr().out

    def test_terminal_without_files(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'stdin', _Terminal(BytesIO()))
        assert main([]) == 1
        assert 'usage: maf2dist' in capsys.readouterr().err

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(['-h'])
        assert info.value.code == 0
        assert '--core' in capsys.readouterr().out

    def test_unknown_option(self):
        with pytest.raises(SystemExit) as info:
            main(['--frobnicate'])
        assert info.value.code != 0

    def test_missing_file(self, tmp_path, capsys):
        missing = tmp_path / 'missing.maf'
        status = main([str(missing)])
        assert status != 0
        assert f'maf2dist: {missing}:' in capsys.readouterr().err

    def test_missing_file_aborts_run(self, tmp_path, capsys):
        good = tmp_path / 'a.maf'
        good.write_bytes(MAF)
        assert main([str(tmp_path / 'missing.maf'), str(good)]) != 0
        assert capsys.readouterr().out == ''

    def test_format_error(self, tmp_path, capsys):
        path = tmp_path / 'bad.maf'
        path.write_bytes(b'a score=0\n')
        assert main([str(path)]) == 1
        assert 'line 1' in capsys.readouterr().err

    def test_truncated_gzip(self, tmp_path, capsys):
        path = tmp_path / 'aln.maf.gz'
        path.write_bytes(gzip.compress(MAF + BLOCK * 200)[:-10])
        assert main([str(path)]) == 1
        assert f'maf2dist: {path}: corrupt or truncated' in capsys.readouterr().err

    def test_compression_module_missing(self, tmp_path, monkeypatch, capsys):
        def import_module(name): raise ImportError(name)
        monkeypatch.setattr(xopen, 'import_module', import_module)
        path = tmp_path / 'aln.maf.zst'
        path.write_bytes(b'\x28\xb5\x2f\xfd' + MAF)
        assert main([str(path)]) == 1
        assert 'zstandard module is not installed' in capsys.readouterr().err



class TestRunConfig:
    def test_from_args(self):
        _, args = parse_args(['--complete-deletion', '-t', '3', '--strategy', 'scalar', '--saturated', '2.5', 'f'])
        config = RunConfig.from_args(args)
        assert config == RunConfig(core=True, threads=3, strategy='scalar', saturated=2.5)

    def test_defaults(self):
        _, args = parse_args([])
        assert not RunConfig.from_args(args).core
