"""Tests for scripts/seed_users.py (CLI wrapper around app.core.seed)."""
from unittest.mock import patch

import scripts.seed_users as seed_users
from app.core.store import InMemoryDocumentStore, StoreError


def test_seeds_into_connected_store(capsys):
    store = InMemoryDocumentStore()
    with patch.object(seed_users.MongoDocumentStore, "connect", return_value=store) as connect:
        exit_code = seed_users.main([
            "--connection", "mongodb://mongo:27017",
            "--database", "scim",
            "--collection", "users",
            "--count", "5",
        ])

    assert exit_code == 0
    connect.assert_called_once_with("mongodb://mongo:27017", "scim", "users", 5.0)
    assert len(store) == 5
    assert "Inserted 5 of 5 users" in capsys.readouterr().out


def test_unreachable_store_exits_nonzero(capsys):
    with patch.object(
        seed_users.MongoDocumentStore,
        "connect",
        side_effect=StoreError("ping", "no primary"),
    ):
        exit_code = seed_users.main(["--connection", "mongodb://nowhere:27017"])

    assert exit_code == 1
    assert "Cannot reach MongoDB" in capsys.readouterr().err
