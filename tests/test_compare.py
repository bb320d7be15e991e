import numpy as np
import pytest
from maf2dist import DependencyWarning
from maf2dist.containers.block import UnequalLengthError
from maf2dist.engines.compare import Comparator, ComparisonStat, Strategy, compare
from maf2dist.utils.resources import RESOURCES

STRATEGIES = [Strategy.SCALAR, Strategy.WIDE]


def _reference(a: bytes, b: bytes) -> ComparisonStat:
    pairs = [(x, y) for x, y in zip(a, b) if x != ord('-') and y != ord('-')]
    return ComparisonStat(len(pairs), sum(x != y for x, y in pairs))


def _random_seq(rng, n: int, alphabet: bytes = b'ACGT-') -> bytes:
    return bytes(rng.choice(np.frombuffer(alphabet, dtype=np.uint8), size=n))


class TestComparisonStat:
    def test_combine(self):
        assert ComparisonStat(4, 1) + ComparisonStat(2, 2) == ComparisonStat(6, 3)

    def test_identity_element(self):
        s = ComparisonStat(7, 3)
        assert s + ComparisonStat.ZERO == s
        assert ComparisonStat.ZERO + s == s

    def test_raw(self):
        assert ComparisonStat(4, 1).raw == 0.25
        assert ComparisonStat.ZERO.raw is None

    def test_invalid_counts(self):
        with pytest.raises(ValueError, match="non-negative"):
            ComparisonStat(-1, 0)
        with pytest.raises(ValueError, match="cannot exceed"):
            ComparisonStat(1, 2)


class TestComparator:
    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_no_gaps(self, strategy):
        assert compare(b'ACGT', b'ACGA', strategy) == ComparisonStat(4, 1)

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_gaps_skipped(self, strategy):
        assert compare(b'AC-T', b'ACG-', strategy) == ComparisonStat(2, 0)

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_all_gaps(self, strategy):
        assert compare(b'----', b'ACGT', strategy) == ComparisonStat.ZERO

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_empty(self, strategy):
        assert compare(b'', b'', strategy) == ComparisonStat.ZERO

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_case_sensitive(self, strategy):
        assert compare(b'acgt', b'ACGT', strategy) == ComparisonStat(4, 4)

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_unequal_length(self, strategy):
        with pytest.raises(UnequalLengthError, match="lengths 4 and 3"):
            compare(b'ACGT', b'ACG', strategy)

    def test_arrays_accepted(self):
        a = np.frombuffer(b'ACGTACGT', dtype=np.uint8)
        b = np.frombuffer(b'ACGAAC-T', dtype=np.uint8)
        assert Comparator()(a, b) == ComparisonStat(7, 1)

    def test_auto_resolves(self):
        assert Comparator().strategy in (Strategy.SCALAR, Strategy.WIDE)
        assert Comparator('scalar').strategy is Strategy.SCALAR

    def test_wide_unavailable_falls_back(self, monkeypatch):
        monkeypatch.setattr(RESOURCES, 'has_popcount', False)
        with pytest.warns(DependencyWarning, match="bitwise_count"):
            comparator = Comparator('wide')
        assert comparator.strategy is Strategy.SCALAR
        assert comparator(b'ACGT', b'A-GA') == ComparisonStat(3, 1)
        assert Comparator().strategy is Strategy.SCALAR

    def test_invalid_width(self):
        with pytest.raises(ValueError, match="width"):
            Comparator('wide', width=12)

    def test_invalid_strategy(self):
        with pytest.raises(ValueError):
            Comparator('simd')


class TestStrategiesAgree:
    @pytest.mark.parametrize("width", Comparator.WIDTHS)
    @pytest.mark.parametrize("length", [0, 1, 7, 8, 63, 64, 65, 130, 1000])
    def test_random_sequences(self, width, length):
        rng = np.random.default_rng(length * 100 + width)
        scalar, wide = Comparator('scalar'), Comparator('wide', width=width)
        for _ in range(5):
            a, b = _random_seq(rng, length), _random_seq(rng, length)
            expected = _reference(a, b)
            assert scalar(a, b) == expected
            assert wide(a, b) == expected

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_gap_exclusion(self, strategy):
        rng = np.random.default_rng(7)
        comparator = Comparator(strategy)
        for _ in range(20):
            a, b = _random_seq(rng, 150, b'ACGT'), _random_seq(rng, 150, b'ACGT')
            pos = int(rng.integers(150))
            before = comparator(a, b)
            gapped = a[:pos] + b'-' + a[pos + 1:]
            after = comparator(gapped, b)
            lost_mismatch = int(a[pos] != b[pos])
            assert after == ComparisonStat(before.compared - 1, before.mismatches - lost_mismatch)
            # Once one side is a gap, the other side no longer matters
            assert comparator(gapped, b[:pos] + b'-' + b[pos + 1:]) == after
            assert comparator(gapped, b[:pos] + b'N' + b[pos + 1:]) == after
