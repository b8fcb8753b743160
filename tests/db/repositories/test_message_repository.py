"""Tests for MessageRepository."""

import pytest
from datetime import datetime, timedelta

from supportdesk.db.database_models import MessageDO, SenderType
from supportdesk.errors import StorageWriteError


@pytest.fixture
def repo(message_repo):
    return message_repo


def _make_msg(**overrides):
    """Factory for MessageDO with sensible defaults."""
    defaults = dict(id="m1", conversation_id="c1", sender_type=SenderType.USER, text="hello", sender_id="u1")
    defaults.update(overrides)
    return MessageDO(**defaults)


class TestMessageRepository:
    """Tests for MessageRepository."""

    class TestAdd:
        """SUT: MessageRepository.add"""

        def test_assigns_seq(self, repo):
            first = repo.add(_make_msg(id="m1"))
            second = repo.add(_make_msg(id="m2"))
            assert first.seq is not None
            assert second.seq > first.seq

        def test_fields_persisted(self, repo):
            repo.add(_make_msg(sender_type=SenderType.BOT, sender_id=None, text="welcome"))
            result = repo.get_by_conversation("c1")[0]
            assert result.sender_type == SenderType.BOT
            assert result.sender_id is None
            assert result.text == "welcome"

        def test_duplicate_id_raises(self, repo):
            repo.add(_make_msg())
            with pytest.raises(StorageWriteError):
                repo.add(_make_msg())

    class TestGetByConversation:
        """SUT: MessageRepository.get_by_conversation"""

        def test_oldest_first(self, repo):
            base = datetime(2024, 1, 1)
            repo.add(_make_msg(id="late", created_at=base + timedelta(minutes=5)))
            repo.add(_make_msg(id="early", created_at=base))

            assert [m.id for m in repo.get_by_conversation("c1")] == ["early", "late"]

        def test_ties_broken_by_insert_order(self, repo):
            same = datetime(2024, 1, 1)
            for i in range(5):
                repo.add(_make_msg(id=f"m{i}", created_at=same))

            assert [m.id for m in repo.get_by_conversation("c1")] == [f"m{i}" for i in range(5)]

        def test_limit(self, repo):
            for i in range(5):
                repo.add(_make_msg(id=f"m{i}"))
            assert len(repo.get_by_conversation("c1", limit=2)) == 2

        def test_scoped_to_conversation(self, repo):
            repo.add(_make_msg(id="m1", conversation_id="c1"))
            repo.add(_make_msg(id="m2", conversation_id="c2"))
            assert [m.id for m in repo.get_by_conversation("c1")] == ["m1"]

        def test_empty(self, repo):
            assert repo.get_by_conversation("none") == []

    class TestGetRecent:
        """SUT: MessageRepository.get_recent"""

        def test_last_n_chronological(self, repo):
            same = datetime(2024, 1, 1)
            for i in range(6):
                repo.add(_make_msg(id=f"m{i}", created_at=same))

            assert [m.id for m in repo.get_recent("c1", limit=3)] == ["m3", "m4", "m5"]

    class TestCount:
        """SUT: MessageRepository.count_by_conversation"""

        def test_count(self, repo):
            repo.add(_make_msg(id="m1"))
            repo.add(_make_msg(id="m2"))
            assert repo.count_by_conversation("c1") == 2
            assert repo.count_by_conversation("c2") == 0
