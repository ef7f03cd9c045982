"""Tests for the domain layer."""

import json
import pytest
from datetime import datetime, timezone
from modulehub.domain import Ref, RefKind, RefInfo, SemVer, ManagerEvent, is_valid_ref_name


class TestSemVerParse:
    """Tests for SemVer.parse()."""

    def test_parse_plain(self):
        """Test parsing a plain three-part version."""
        v = SemVer.parse("1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.extra == ()
        assert v.prefix == ''

    def test_parse_v_prefix(self):
        """Test parsing with a leading 'v'."""
        v = SemVer.parse("v2.0.1")
        assert (v.major, v.minor, v.patch) == (2, 0, 1)
        assert v.prefix == 'v'

    def test_parse_word_prefix(self):
        """Test parsing with a longer non-digit prefix."""
        v = SemVer.parse("release-3.1.0")
        assert (v.major, v.minor, v.patch) == (3, 1, 0)
        assert v.prefix == 'release-'

    def test_parse_extra_components(self):
        """Test parsing further numeric and alphanumeric components."""
        v = SemVer.parse("1.0.0.4.beta2")
        assert v.extra == ("4", "beta2")

    @pytest.mark.parametrize("text", [
        "main", "", "1", "1.2", "1.2.x", "1..2.3", "1.2.3.", "1.2.3-beta", "v1.2.3 extra", "1.2.3/4",
    ])
    def test_parse_rejects_non_versions(self, text):
        """Non-conforming strings are not versions."""
        assert SemVer.parse(text) is None

    def test_parse_none(self):
        """None input is not a version either."""
        assert SemVer.parse(None) is None

    @pytest.mark.parametrize("text", ["0.0.1", "1.2.3", "10.20.30", "1.0.0.rc1"])
    def test_round_trip(self, text):
        """Canonical strings survive parse and str."""
        assert str(SemVer.parse(text)) == text

    def test_str_drops_prefix(self):
        """The prefix is display-only and not part of str()."""
        assert str(SemVer.parse("v1.2.3")) == "1.2.3"


class TestSemVerOrdering:
    """Tests for SemVer comparison."""

    def test_field_order(self):
        """Major, then minor, then patch."""
        assert SemVer.parse("1.2.3") < SemVer.parse("1.2.4")
        assert SemVer.parse("1.2.9") < SemVer.parse("1.3.0")
        assert SemVer.parse("1.9.9") < SemVer.parse("2.0.0")

    def test_numeric_not_lexicographic(self):
        """Fields compare as numbers."""
        assert SemVer.parse("1.10.0") > SemVer.parse("1.9.0")

    def test_extra_components(self):
        """Extra components order after the three main fields."""
        assert SemVer.parse("1.0.0") < SemVer.parse("1.0.0.1")
        assert SemVer.parse("1.0.0.2") < SemVer.parse("1.0.0.10")
        assert SemVer.parse("1.0.0.9") < SemVer.parse("1.0.0.alpha")

    def test_prefix_ignored_for_equality(self):
        """v1.2.3 and 1.2.3 are the same version."""
        assert SemVer.parse("v1.2.3") == SemVer.parse("1.2.3")
        assert hash(SemVer.parse("v1.2.3")) == hash(SemVer.parse("1.2.3"))

    def test_max_is_greatest(self):
        """MAX sorts above every parsed version."""
        assert SemVer.parse("999999.0.0") < SemVer.MAX
        assert max([SemVer.parse("1.0.0"), SemVer.MAX, SemVer.parse("5.0.0")]) is SemVer.MAX

    def test_sorted(self):
        """Versions sort correctly as a list."""
        versions = [SemVer.parse(s) for s in ["2.0.0", "1.10.0", "1.2.0", "1.2.0.1"]]
        assert [str(v) for v in sorted(versions)] == ["1.2.0", "1.2.0.1", "1.10.0", "2.0.0"]


class TestMinorCompatible:
    """Tests for SemVer.minor_compatible()."""

    def test_newer_minor_is_compatible(self):
        assert SemVer.parse("1.2.3").minor_compatible(SemVer.parse("1.1.0"))

    def test_major_mismatch(self):
        assert not SemVer.parse("1.2.3").minor_compatible(SemVer.parse("2.0.0"))

    def test_lower_minor(self):
        assert not SemVer.parse("1.0.0").minor_compatible(SemVer.parse("1.5.0"))

    def test_patch_ignored(self):
        """Patch never affects compatibility."""
        assert SemVer.parse("1.1.0").minor_compatible(SemVer.parse("1.1.9"))

    def test_max_baseline_keeps_major_gate(self):
        """No parsed version is compatible with the MAX sentinel."""
        assert not SemVer.parse("1.2.3").minor_compatible(SemVer.MAX)
        assert SemVer.MAX.minor_compatible(SemVer.MAX)


class TestRef:
    """Tests for Ref domain object."""

    def test_tag_and_branch(self):
        tag = Ref.tag("1.0.0")
        branch = Ref.branch("main")
        assert tag.kind is RefKind.TAG
        assert tag.type == "tag"
        assert branch.kind is RefKind.BRANCH
        assert branch.type == "branch"

    def test_parse_valid(self):
        assert Ref.parse("tag", "1.0.0") == Ref.tag("1.0.0")
        assert Ref.parse("branch", "main") == Ref.branch("main")

    def test_parse_unknown_kind(self):
        assert Ref.parse("commit", "abc123") is None
        assert Ref.parse("Tag", "1.0.0") is None

    def test_parse_empty_name(self):
        assert Ref.parse("tag", "") is None

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Ref.tag("")

    @pytest.mark.parametrize("name", [
        ".", "..", "../1.0.0", "a/../b", "/tmp/victim/x1.5.0",
        "a\\b", "feature//x", "feature/", ".hidden", "a/.git",
    ])
    def test_path_like_names_rejected(self, name):
        """Names that cannot be a single cache folder are not refs."""
        assert not is_valid_ref_name(name)
        assert Ref.parse("tag", name) is None
        assert Ref.parse("branch", name) is None
        with pytest.raises(ValueError):
            Ref.branch(name)

    @pytest.mark.parametrize("name", ["1.0.0", "v2.0.0-rc.1", "feature/login", "release/1.x", "a..b"])
    def test_slashes_and_dots_inside_names_allowed(self, name):
        assert is_valid_ref_name(name)
        assert Ref.branch(name).name == name

    def test_equality_and_hash(self):
        """Refs compare by kind and name."""
        assert Ref.tag("main") != Ref.branch("main")
        assert len({Ref.tag("1.0.0"), Ref.tag("1.0.0"), Ref.branch("1.0.0")}) == 2

    def test_semver_for_tags_only(self):
        assert Ref.tag("v1.2.0").semver == SemVer.parse("1.2.0")
        assert Ref.tag("latest").semver is None
        assert Ref.branch("1.2.0").semver is None

    def test_to_dict(self):
        assert Ref.tag("v1.2.0").to_dict() == {'kind': 'tag', 'name': 'v1.2.0', 'version': '1.2.0'}
        assert Ref.branch("main").to_dict() == {'kind': 'branch', 'name': 'main', 'version': None}

    def test_str(self):
        assert str(Ref.branch("develop")) == "branch:develop"


class TestRefInfo:
    """Tests for RefInfo."""

    def test_to_dict_with_timestamp(self):
        ts = datetime(2023, 1, 3, 20, 28, 34, tzinfo=timezone.utc)
        d = RefInfo(Ref.tag("0.0.2"), ts).to_dict()
        assert d['name'] == "0.0.2"
        assert d['published_at'] == "2023-01-03T20:28:34+00:00"

    def test_branch_without_timestamp(self):
        info = RefInfo(Ref.branch("main"))
        assert info.published_at is None
        assert info.to_dict()['published_at'] is None


class TestManagerEvent:
    """Tests for ManagerEvent."""

    def test_to_jsonl(self):
        event = ManagerEvent(
            type='local_versions_changed',
            repository='https://github.com/Org/Repo.git',
            timestamp=datetime(2024, 5, 1, 12, 0, 0),
            data={'refs': ['tag:1.0.0']},
        )
        parsed = json.loads(event.to_jsonl())
        assert parsed['type'] == 'local_versions_changed'
        assert parsed['timestamp'] == '2024-05-01T12:00:00'
        assert parsed['data'] == {'refs': ['tag:1.0.0']}
