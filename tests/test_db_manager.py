import os

import pytest

from database.db_manager import DatabaseManager


class TestDatabaseManager:

    def test_open_creates_database_in_folder(self, tmp_path):
        folder = tmp_path / "data"
        db = DatabaseManager.open(str(folder))
        try:
            assert os.path.exists(folder / "cashflow.db")
            count = db.get_connection().execute(
                "SELECT COUNT(*) AS cnt FROM categories"
            ).fetchone()["cnt"]
            assert count == 7
        finally:
            db.close()

    def test_initialize_is_repeatable(self, db):
        db.initialize()
        count = db.get_connection().execute(
            "SELECT COUNT(*) AS cnt FROM categories"
        ).fetchone()["cnt"]
        assert count == 7

    def test_unit_of_work_rolls_back_on_error(self, db, account_dao):
        with pytest.raises(RuntimeError):
            with db.unit_of_work() as conn:
                conn.execute("INSERT INTO bank_accounts(name) VALUES ('Cheque')")
                raise RuntimeError("boom")

        assert account_dao.get_all() == []

    def test_unit_of_work_commits(self, db, account_dao):
        with db.unit_of_work() as conn:
            conn.execute("INSERT INTO bank_accounts(name) VALUES ('Cheque')")

        assert [a.name for a in account_dao.get_all()] == ["Cheque"]
