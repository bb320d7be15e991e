import pytest
from maf2dist.core.identity import IdentityRegistry, PairKey, strip_name


class TestStripName:
    def test_strips_at_first_dot(self):
        assert strip_name(b'hg38.chr1') == b'hg38'
        assert strip_name(b'hg38.chr1.random') == b'hg38'

    def test_no_dot(self):
        assert strip_name(b'panTro4') == b'panTro4'

    def test_leading_dot(self):
        assert strip_name(b'.chr1') == b''


class TestPairKey:
    def test_unordered(self):
        assert PairKey.of(b'mm10', b'hg38') == PairKey.of(b'hg38', b'mm10')
        assert PairKey.of(b'mm10', b'hg38') == (b'hg38', b'mm10')

    def test_same_identity_rejected(self):
        with pytest.raises(ValueError, match="distinct"):
            PairKey.of(b'hg38', b'hg38')

    def test_hashable(self):
        d = {PairKey.of(b'a', b'b'): 1}
        assert d[PairKey.of(b'b', b'a')] == 1


class TestIdentityRegistry:
    def test_first_seen_order(self):
        registry = IdentityRegistry()
        assert registry.add(b'mm10.chr2') == b'mm10'
        registry.add(b'hg38.chr1')
        registry.add(b'mm10.chr7')
        registry.add(b'rn6')
        assert registry.identities == (b'mm10', b'hg38', b'rn6')
        assert len(registry) == 3

    def test_index(self):
        registry = IdentityRegistry([b'b.1', b'a.1', b'b.2'])
        assert registry.index(b'b') == 0
        assert registry.index(b'a') == 1
        with pytest.raises(KeyError, match="Unknown identity"):
            registry.index(b'c')

    def test_str_names(self):
        registry = IdentityRegistry()
        assert registry.add('hg38.chr1') == b'hg38'
        assert b'hg38' in registry

    def test_independent_instances(self):
        a, b = IdentityRegistry([b'x']), IdentityRegistry()
        assert b'x' not in b
        assert list(a) == [b'x']
