"""Tests for the SQLModel repositories."""

from __future__ import annotations

from debtpath.infra.repositories import SQLModelAprOverrideRepository, SQLModelCustomDebtRepository
from debtpath.models import CustomDebt


class TestCustomDebtRepository:
    def test_create_and_get(self, session_factory):
        repo = SQLModelCustomDebtRepository(session_factory)

        created = repo.create(
            CustomDebt(user_id=0, name="Dentist", balance=800.0, apr=0.0), user_id=1
        )

        assert created.id is not None
        assert created.user_id == 1
        assert created.debt_key == f"custom_{created.id}"
        fetched = repo.get_by_id(created.id, user_id=1)
        assert fetched is not None
        assert fetched.name == "Dentist"

    def test_rows_are_scoped_by_user(self, session_factory):
        repo = SQLModelCustomDebtRepository(session_factory)
        mine = repo.create(CustomDebt(user_id=1, name="Mine", balance=100.0), user_id=1)
        repo.create(CustomDebt(user_id=2, name="Theirs", balance=200.0), user_id=2)

        assert [row.name for row in repo.list_all(user_id=1)] == ["Mine"]
        assert repo.get_by_id(mine.id, user_id=2) is None
        assert repo.delete(mine.id, user_id=2) is False

    def test_update_persists_changes(self, session_factory):
        repo = SQLModelCustomDebtRepository(session_factory)
        row = repo.create(CustomDebt(user_id=1, name="Loan", balance=1000.0, apr=9.0), user_id=1)

        row.balance = 750.0
        updated = repo.update(row, user_id=1)

        assert updated.balance == 750.0
        assert repo.get_by_id(row.id, user_id=1).balance == 750.0

    def test_delete(self, session_factory):
        repo = SQLModelCustomDebtRepository(session_factory)
        row = repo.create(CustomDebt(user_id=1, name="Loan", balance=1000.0), user_id=1)

        assert repo.delete(row.id, user_id=1) is True
        assert repo.list_all(user_id=1) == []


class TestAprOverrideRepository:
    def test_upsert_replaces_existing(self, session_factory):
        repo = SQLModelAprOverrideRepository(session_factory)

        first = repo.upsert("acc_1", 19.0, user_id=1)
        second = repo.upsert("acc_1", 12.5, user_id=1)

        assert first.id == second.id
        assert repo.get("acc_1", user_id=1).apr == 12.5

    def test_as_mapping_is_per_user(self, session_factory):
        repo = SQLModelAprOverrideRepository(session_factory)
        repo.upsert("acc_1", 19.0, user_id=1)
        repo.upsert("acc_2", 7.0, user_id=1)
        repo.upsert("acc_1", 30.0, user_id=2)

        assert repo.as_mapping(user_id=1) == {"acc_1": 19.0, "acc_2": 7.0}

    def test_delete(self, session_factory):
        repo = SQLModelAprOverrideRepository(session_factory)
        repo.upsert("acc_1", 19.0, user_id=1)

        assert repo.delete("acc_1", user_id=1) is True
        assert repo.delete("acc_1", user_id=1) is False
        assert repo.get("acc_1", user_id=1) is None
