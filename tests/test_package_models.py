# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Package Data Models
"""

import pytest

from capkg.core.errors import ParsingError
from capkg.models import (
    ConflictPair,
    EntryKind,
    InstallOutcome,
    PackageIdentity,
    TransactionEntry,
)


class TestPackageIdentity:
    """Test identity parsing, equality and ordering"""

    def test_parse_and_render(self):
        identity = PackageIdentity.parse(" libfoo@2.1 ")
        assert identity == PackageIdentity("libfoo", "2.1")
        assert str(identity) == "libfoo@2.1"

    @pytest.mark.parametrize("token", ["libfoo", "a@1@2", "@1.0", "libfoo@", ""])
    def test_parse_rejects_malformed_tokens(self, token):
        with pytest.raises(ParsingError) as exc_info:
            PackageIdentity.parse(token)
        assert exc_info.value.token == token

    def test_ordering_by_name_then_version(self):
        ids = [
            PackageIdentity("b", "1.0"),
            PackageIdentity("a", "2.0"),
            PackageIdentity("a", "1.0"),
        ]
        assert sorted(ids) == [
            PackageIdentity("a", "1.0"),
            PackageIdentity("a", "2.0"),
            PackageIdentity("b", "1.0"),
        ]

    def test_versions_compare_lexicographically(self):
        assert PackageIdentity("a", "10.0") < PackageIdentity("a", "9.0")

    def test_hashable(self):
        assert len({PackageIdentity("a", "1"), PackageIdentity("a", "1")}) == 1


class TestConflictPair:
    """Test conflict pair normalization"""

    def test_normalizes_order(self):
        low, high = PackageIdentity("C", "1.0"), PackageIdentity("C", "2.0")
        assert ConflictPair.of(high, low) == ConflictPair.of(low, high)
        assert tuple(ConflictPair.of(high, low)) == (low, high)

    def test_render(self):
        pair = ConflictPair.of(PackageIdentity("C", "2.0"), PackageIdentity("C", "1.0"))
        assert pair.render() == "C@1.0 C@2.0"
        assert pair.name == "C"

    def test_rejects_different_names(self):
        with pytest.raises(ValueError):
            ConflictPair.of(PackageIdentity("A", "1"), PackageIdentity("B", "2"))

    def test_rejects_identical_identities(self):
        with pytest.raises(ValueError):
            ConflictPair.of(PackageIdentity("A", "1"), PackageIdentity("A", "1"))


class TestTransactionEntry:
    """Test journal line encoding"""

    def test_markers(self):
        assert TransactionEntry.from_line("ISLEM BASLADI\n").kind == EntryKind.STARTED
        assert TransactionEntry.from_line("ISLEM TAMAMLANDI").kind == EntryKind.COMPLETED
        assert TransactionEntry.started().to_line() == "ISLEM BASLADI"
        assert TransactionEntry.completed().to_line() == "ISLEM TAMAMLANDI"

    def test_other_lines_are_steps(self):
        entry = TransactionEntry.from_line("installing libc@1.0\n")
        assert entry.kind == EntryKind.STEP
        assert entry.description == "installing libc@1.0"
        assert entry.to_line() == "installing libc@1.0"

    def test_blank_line_is_not_an_entry(self):
        assert TransactionEntry.from_line("   \n") is None


class TestInstallOutcome:
    """Test the run outcome model"""

    def test_defaults_and_schema_example(self):
        outcome = InstallOutcome(root="app@1.0")
        schema = InstallOutcome.model_json_schema()

        assert outcome.applied == []
        assert outcome.dependencies == {}
        assert schema["example"]["dependencies"]["app@1.0"] == ["libc@2.0"]

    def test_json_dump(self):
        outcome = InstallOutcome(root="app@1.0", applied=["app@1.0"], dependencies={"app@1.0": []})
        data = outcome.model_dump(mode="json")
        assert data["operation"] == "install"
        assert data["state"] == "completed"
