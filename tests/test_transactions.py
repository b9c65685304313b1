# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for the Transaction Journal and its File Resource
"""

import pytest

from capkg.core.errors import JournalIOError, TransactionAlreadyCompletedError
from capkg.models import EntryKind, TransactionState
from capkg.registry import FileResource, TransactionJournal


class TestJournalLifecycle:
    """Test begin / step / commit / rollback"""

    def test_new_journal_is_empty(self, journal, journal_path):
        assert journal.state() == TransactionState.EMPTY
        assert not journal_path.exists()

    def test_begin_commit_is_completed(self, journal):
        journal.begin()
        journal.commit()
        assert journal.state() == TransactionState.COMPLETED

    def test_rollback_after_commit_fails(self, journal, journal_path):
        journal.begin()
        journal.commit()

        with pytest.raises(TransactionAlreadyCompletedError):
            journal.rollback()

        # Committed history is left untouched
        assert journal.state() == TransactionState.COMPLETED
        assert journal_path.read_text() == "ISLEM BASLADI\nISLEM TAMAMLANDI\n"

    def test_step_without_commit_is_in_progress(self, journal):
        journal.begin()
        journal.step("installing libc@1.0")
        assert journal.state() == TransactionState.IN_PROGRESS

    def test_rollback_in_progress_clears(self, journal, journal_path):
        journal.begin()
        journal.step("installing libc@1.0")

        journal.rollback()

        assert journal.state() == TransactionState.EMPTY
        assert journal_path.read_text() == ""

    def test_rollback_on_empty_journal(self, journal):
        journal.rollback()
        assert journal.state() == TransactionState.EMPTY

    def test_file_format(self, journal, journal_path):
        journal.begin()
        journal.step("installing libc@1.0")
        journal.step("installing app@1.0")
        journal.commit()

        assert journal_path.read_text(encoding="utf-8") == (
            "ISLEM BASLADI\n"
            "installing libc@1.0\n"
            "installing app@1.0\n"
            "ISLEM TAMAMLANDI\n"
        )

    def test_entries_skip_blank_lines(self, journal, journal_path):
        journal_path.parent.mkdir(parents=True, exist_ok=True)
        journal_path.write_text("ISLEM BASLADI\n\ninstalling a@1\n\n", encoding="utf-8")

        kinds = [entry.kind for entry in journal.entries()]

        assert kinds == [EntryKind.STARTED, EntryKind.STEP]
        assert journal.state() == TransactionState.IN_PROGRESS

    def test_steps_belong_to_last_transaction(self, journal):
        journal.begin()
        journal.step("installing old@1")
        journal.commit()
        journal.begin()
        journal.step("installing new@1")
        journal.step("installing new@2")

        assert journal.steps() == ["installing new@1", "installing new@2"]

    def test_clear_ignores_state(self, journal):
        journal.begin()
        journal.commit()
        journal.clear()
        assert journal.state() == TransactionState.EMPTY

    @pytest.mark.parametrize("description", ["", "   ", "two\nlines", "ISLEM TAMAMLANDI"])
    def test_invalid_step_descriptions(self, journal, description):
        journal.begin()
        with pytest.raises(ValueError):
            journal.step(description)
        assert journal.entries()[-1].kind == EntryKind.STARTED


class TestFileResourceErrors:
    """Test I/O failures surface as JournalIOError"""

    def test_append_to_directory(self, tmp_path):
        journal = TransactionJournal(FileResource(tmp_path))

        with pytest.raises(JournalIOError) as exc_info:
            journal.begin()

        assert exc_info.value.operation == "append"
        assert isinstance(exc_info.value.cause, OSError)

    def test_read_directory(self, tmp_path):
        with pytest.raises(JournalIOError) as exc_info:
            FileResource(tmp_path).read_all()
        assert exc_info.value.operation == "read"

    def test_missing_file_reads_empty(self, tmp_path):
        resource = FileResource(tmp_path / "nope.log")
        assert resource.read_all() == ""
        assert resource.size() == 0
