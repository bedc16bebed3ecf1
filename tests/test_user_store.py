"""
Tests for UserStore load, lookup, insert, update and persist
"""

import ast

import pytest

from userstore.exceptions import PersistTargetMissingError
from userstore.models.schema import DEFAULT_SCHEMA


class TestInitialize:
    """Test loading the collection"""

    def test_loads_collection_verbatim(self, alice_bob, make_store):
        store = make_store(alice_bob)
        store.initialize()

        assert store.is_initialized
        assert store.get_all() == [
            {"username": "alice", "role": "editor"},
            {"username": "bob", "role": "admin"},
        ]

    def test_initialize_is_idempotent(self, alice_bob, write_users, make_store):
        store = make_store(alice_bob)
        store.initialize()
        before = store.get_all()

        write_users({1: {"username": "mallory"}})
        store.initialize()

        assert store.get_all() == before
        assert store.get("username", "mallory") is None

    def test_missing_source_starts_empty(self, tmp_path, make_store):
        store = make_store(tmp_path / "absent.repo")
        store.initialize()

        assert store.count() == 0
        assert store.is_initialized

    def test_unparseable_source_starts_empty(self, repo_path, make_store):
        repo_path.write_text("{1: {'username': ", encoding="utf-8")
        store = make_store(repo_path)

        assert store.get_all() == []

    def test_non_collection_literal_starts_empty(self, repo_path, make_store):
        repo_path.write_text("['alice', 'bob']", encoding="utf-8")
        store = make_store(repo_path)

        assert len(store) == 0

    def test_code_in_source_is_not_executed(self, repo_path, make_store, tmp_path):
        marker = tmp_path / "pwned"
        repo_path.write_text(f"open({str(marker)!r}, 'w')", encoding="utf-8")
        store = make_store(repo_path)

        assert store.get_all() == []
        assert not marker.exists()

    def test_first_access_loads_lazily(self, alice_bob, make_store):
        store = make_store(alice_bob)
        assert not store.is_initialized

        assert store.get("username", "bob") is not None
        assert store.is_initialized


class TestGet:
    """Test value-based lookup"""

    def test_finds_named_value(self, alice_bob, make_store):
        store = make_store(alice_bob)

        assert store.get("username", "bob") == {"username": "bob", "role": "admin"}

    def test_empty_value_is_not_found(self, alice_bob, make_store):
        store = make_store(alice_bob)

        assert store.get("username", "") is None

    def test_empty_value_does_not_match_empty_field(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "carol"})  # every other field is ""

        assert store.get("firstname", "") is None

    def test_matches_value_in_any_field(self, alice_bob, make_store):
        store = make_store(alice_bob)

        assert store.get("role", "editor")["username"] == "alice"
        assert store.get("username", "editor")["username"] == "alice"

    def test_first_match_wins(self, write_users, make_store):
        store = make_store(write_users({
            1: {"username": "dave", "role": "admin"},
            2: {"username": "erin", "role": "admin"},
        }))

        assert store.get("role", "admin")["username"] == "dave"

    def test_no_match_returns_none(self, alice_bob, make_store):
        store = make_store(alice_bob)

        assert store.get("username", "zoe") is None

    def test_returns_key_role_fields(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "frank", "password": "hash"})

        assert store.get("username", "frank")["password"] == "hash"

    def test_returned_record_is_a_copy(self, alice_bob, make_store):
        store = make_store(alice_bob)
        record = store.get("username", "alice")
        record["role"] = "admin"

        assert store.get("username", "alice")["role"] == "editor"


class TestAdd:
    """Test record insertion"""

    def test_record_has_exactly_all_fields(self, repo_path, make_store):
        store = make_store(repo_path)
        record = store.add({"username": "gina", "nickname": "g", "password": "x"})

        assert tuple(record) == DEFAULT_SCHEMA.all_fields()
        assert "nickname" not in record
        assert record["firstname"] == ""
        assert record["password"] == "x"

    def test_none_and_non_string_values(self, repo_path, make_store):
        store = make_store(repo_path)
        record = store.add({"username": "hank", "role": None, "firstname": 7})

        assert record["role"] == ""
        assert record["firstname"] == "7"

    def test_first_record_is_position_one(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "ivy"})

        persisted = ast.literal_eval(repo_path.read_text(encoding="utf-8"))
        assert list(persisted) == [1]

    def test_position_follows_highest_existing(self, write_users, make_store):
        path = write_users({
            1: {"username": "jack"},
            5: {"username": "kate"},
        })
        store = make_store(path)
        store.add({"username": "liam"})

        persisted = ast.literal_eval(path.read_text(encoding="utf-8"))
        assert list(persisted) == [1, 5, 6]
        assert persisted[6]["username"] == "liam"

    def test_duplicates_are_allowed(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "mia"})
        store.add({"username": "mia"})

        assert store.count() == 2

    def test_add_persists_before_returning(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "noah", "role": "editor"})

        reloaded = make_store(repo_path)
        assert reloaded.get("username", "noah")["role"] == "editor"


class TestUpdate:
    """Test field updates"""

    def test_updates_every_matching_record(self, write_users, make_store):
        path = write_users({
            1: {"username": "shared@example.com", "role": "editor"},
            2: {"username": "olga", "firstname": "shared@example.com", "role": "editor"},
            3: {"username": "pete", "role": "editor"},
        })
        store = make_store(path)
        store.update("username", "shared@example.com", {"role": "admin"})

        roles = [record["role"] for record in store.get_all()]
        assert roles == ["admin", "admin", "editor"]

    def test_unknown_keys_are_ignored(self, alice_bob, make_store):
        store = make_store(alice_bob)
        store.update("username", "alice", {"nickname": "al", "role": "admin"})

        assert store.get("username", "alice") == {"username": "alice", "role": "admin"}

    def test_falsy_value_clears_field(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "quinn", "remember_token": "tok"})
        store.update("username", "quinn", {"remember_token": None})

        assert store.get("username", "quinn")["remember_token"] == ""

    def test_empty_value_is_noop_without_persist(self, alice_bob, make_store):
        before = alice_bob.read_text(encoding="utf-8")
        store = make_store(alice_bob)
        store.update("username", "", {"role": "admin"})

        assert alice_bob.read_text(encoding="utf-8") == before
        assert store.get("username", "alice")["role"] == "editor"

    def test_no_match_still_persists(self, alice_bob, make_store):
        alice_bob.write_text("{1: {'username': 'alice', 'role': 'editor'}}", encoding="utf-8")
        store = make_store(alice_bob)
        store.update("username", "nobody", {"role": "admin"})

        # Rewritten by pformat, content unchanged.
        persisted = ast.literal_eval(alice_bob.read_text(encoding="utf-8"))
        assert persisted == {1: {"username": "alice", "role": "editor"}}
        assert alice_bob.read_text(encoding="utf-8").endswith("\n")

    def test_update_persists(self, alice_bob, make_store):
        store = make_store(alice_bob)
        store.update("username", "bob", {"firstname": "Robert"})

        reloaded = make_store(alice_bob)
        assert reloaded.get("username", "bob")["firstname"] == "Robert"


class TestPersist:
    """Test the full-rewrite persist path"""

    def test_round_trip_preserves_fields_and_order(self, repo_path, make_store):
        store = make_store(repo_path)
        store.add({"username": "rose", "firstname": "Rose", "password": "p1"})
        store.add({"username": "sam", "lastname": "Ng", "access_token": "a1"})
        store.add({"username": "tess", "role": "admin"})

        reloaded = make_store(repo_path)
        assert reloaded.get_all() == store.get_all()
        assert [tuple(record) for record in reloaded.get_all()] == [
            DEFAULT_SCHEMA.all_fields()
        ] * 3

    def test_missing_target_raises_and_keeps_record(self, tmp_path, make_store):
        store = make_store(tmp_path / "absent.repo")

        with pytest.raises(PersistTargetMissingError) as exc_info:
            store.add({"username": "uma"})

        assert exc_info.value.path == tmp_path / "absent.repo"
        assert "Persisted source not found" in str(exc_info.value)
        assert store.get("username", "uma") is not None
        assert not (tmp_path / "absent.repo").exists()

    def test_missing_target_on_update_keeps_change(self, alice_bob, make_store):
        store = make_store(alice_bob)
        store.initialize()
        alice_bob.unlink()

        with pytest.raises(PersistTargetMissingError):
            store.update("username", "bob", {"role": "editor"})

        assert store.get("username", "bob")["role"] == "editor"


class TestMalformedCollection:
    """Test loaded collections that bypass the record layout"""

    def test_non_mapping_records_are_skipped(self, repo_path, make_store):
        repo_path.write_text("{1: 'alice', 2: {'username': 'bob'}}", encoding="utf-8")
        store = make_store(repo_path)

        assert store.get("username", "alice") is None
        assert store.get("username", "bob") == {"username": "bob"}
        assert store.get_all() == [{"username": "bob"}]
        assert store.count() == 2

    def test_update_skips_non_mapping_records(self, repo_path, make_store):
        repo_path.write_text("{1: 'alice', 2: {'username': 'alice'}}", encoding="utf-8")
        store = make_store(repo_path)
        store.update("username", "alice", {"role": "admin"})

        persisted = ast.literal_eval(repo_path.read_text(encoding="utf-8"))
        assert persisted == {1: "alice", 2: {"username": "alice", "role": "admin"}}

    def test_add_ignores_non_integer_positions(self, repo_path, make_store):
        repo_path.write_text("{'a': {'username': 'vic'}}", encoding="utf-8")
        store = make_store(repo_path)
        store.add({"username": "wes"})

        persisted = ast.literal_eval(repo_path.read_text(encoding="utf-8"))
        assert list(persisted) == ["a", 1]
        assert persisted[1]["username"] == "wes"


class TestSchemaViews:
    """Test schema pass-through on the store"""

    def test_views_match_schema(self, repo_path, make_store):
        store = make_store(repo_path)

        assert store.all_fields() == DEFAULT_SCHEMA.all_fields()
        assert store.visible_fields() == DEFAULT_SCHEMA.visible_fields()
        assert store.key_roles() == DEFAULT_SCHEMA.key_roles()
