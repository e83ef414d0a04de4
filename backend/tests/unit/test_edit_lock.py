"""Tests for EditLockArbiter."""
from backend.services.composer.edit_lock import EditLockArbiter
from backend.services.composer.types import Overridden, Synced


class TestSynced:
    def test_starts_synced_and_empty(self):
        arbiter = EditLockArbiter()
        assert arbiter.state == Synced("")
        assert arbiter.is_manual is False

    def test_sync_publishes_text(self):
        arbiter = EditLockArbiter()
        assert arbiter.sync("Subject: a dragon") is True
        assert arbiter.text == "Subject: a dragon"

    def test_sync_same_text_reports_no_change(self):
        arbiter = EditLockArbiter("Mood: epic")
        assert arbiter.sync("Mood: epic") is False


class TestOverridden:
    def test_edit_locks_out_synthesizer(self):
        arbiter = EditLockArbiter()
        arbiter.edit("my own words")
        assert arbiter.sync("Subject: a dragon") is False
        assert arbiter.text == "my own words"
        assert arbiter.state == Overridden("my own words")

    def test_generated_text_is_treated_as_manual(self):
        arbiter = EditLockArbiter("Subject: a dragon")
        arbiter.accept_generated("A majestic dragon")
        assert arbiter.is_manual is True
        arbiter.sync("Subject: a dragon | Lighting: neon")
        assert arbiter.text == "A majestic dragon"

    def test_editing_to_empty_still_locks(self):
        arbiter = EditLockArbiter("Subject: a dragon")
        arbiter.edit("")
        arbiter.sync("Subject: a dragon")
        assert arbiter.text == ""
        assert arbiter.is_manual is True


class TestRelease:
    def test_reset_hands_control_back(self):
        arbiter = EditLockArbiter()
        arbiter.edit("manual")
        arbiter.reset("Subject: a dragon")
        assert arbiter.state == Synced("Subject: a dragon")
        assert arbiter.sync("Subject: a cat") is True

    def test_clear_resets_to_empty_synced(self):
        arbiter = EditLockArbiter()
        arbiter.edit("manual")
        arbiter.clear()
        assert arbiter.state == Synced("")
        assert arbiter.is_manual is False
