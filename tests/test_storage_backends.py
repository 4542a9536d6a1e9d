"""
Tests for record stores.

Tests MemoryBackend, FileBackend and SupabaseBackend implementations.
"""

import json
import pytest
from pathlib import Path
from unittest.mock import MagicMock, patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from coffeelog.config import Settings
from coffeelog.errors import ConflictError, NotFoundError, StorageError
from coffeelog.models import Patch, RecordKey
from coffeelog.storage.protocol import RecordStore
from coffeelog.storage.file_backend import FileBackend
from coffeelog.storage.memory_backend import MemoryBackend
from coffeelog.storage.factory import create_store
from coffeelog.updates import build_update_instruction


def _item(ts, **extra):
    item = {"userId": "default-user", "timestamp": ts, "amount": 250, "unit": "ml"}
    item.update(extra)
    return item


@pytest.fixture(params=["memory", "file"])
def local_store(request, tmp_path):
    """Each local backend, seeded with three entries."""
    if request.param == "memory":
        store = MemoryBackend()
    else:
        store = FileBackend(str(tmp_path / "data"))
    store.put_record(_item("2024-01-01T08:00:00.000Z"))
    store.put_record(_item("2024-01-02T08:00:00.000Z", rating=4))
    store.put_record(_item("2024-01-03T08:00:00.000Z", location="Office"))
    return store


class TestLocalBackends:
    """Behaviour shared by MemoryBackend and FileBackend."""

    def test_conforms_to_protocol(self, local_store):
        assert isinstance(local_store, RecordStore)

    def test_get_record(self, local_store):
        item = local_store.get_record(RecordKey("default-user", "2024-01-02T08:00:00.000Z"))
        assert item["rating"] == 4

    def test_get_missing_record(self, local_store):
        assert local_store.get_record(RecordKey("default-user", "nope")) is None
        assert local_store.get_record(RecordKey("someone-else", "2024-01-01T08:00:00.000Z")) is None

    def test_put_is_append_only(self, local_store):
        with pytest.raises(ConflictError):
            local_store.put_record(_item("2024-01-01T08:00:00.000Z", amount=1))

        item = local_store.get_record(RecordKey("default-user", "2024-01-01T08:00:00.000Z"))
        assert item["amount"] == 250

    def test_update_sets_only_given_fields(self, local_store):
        key = RecordKey("default-user", "2024-01-02T08:00:00.000Z")
        instruction = build_update_instruction(key, Patch(location="Home"))

        updated = local_store.update_record(instruction)

        assert updated["location"] == "Home"
        assert updated["rating"] == 4
        assert local_store.get_record(key) == updated

    def test_update_missing_record(self, local_store):
        instruction = build_update_instruction(RecordKey("default-user", "nope"), Patch(rating=1))
        with pytest.raises(NotFoundError):
            local_store.update_record(instruction)

    def test_query_newest_first_with_limit(self, local_store):
        items = local_store.query_records("default-user", limit=2)

        assert [i["timestamp"] for i in items] == [
            "2024-01-03T08:00:00.000Z",
            "2024-01-02T08:00:00.000Z",
        ]

    def test_query_other_owner_is_empty(self, local_store):
        assert local_store.query_records("someone-else") == []


class TestFileBackend:
    """Tests specific to the JSON file store."""

    def test_persists_across_instances(self, tmp_path):
        data_dir = tmp_path / "data"
        FileBackend(str(data_dir)).put_record(_item("T1"))

        reopened = FileBackend(str(data_dir))
        assert reopened.get_record(RecordKey("default-user", "T1"))["amount"] == 250

    def test_file_layout(self, tmp_path):
        data_dir = tmp_path / "data"
        FileBackend(str(data_dir)).put_record(_item("T1"))

        with open(data_dir / "default-user.json", encoding="utf-8") as f:
            data = json.load(f)
        assert data["owner"] == "default-user"
        assert "T1" in data["entries"]

    def test_malformed_entries_treated_as_empty(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "default-user.json").write_text(json.dumps({"entries": []}), encoding="utf-8")

        backend = FileBackend(str(data_dir))
        assert backend.query_records("default-user") == []

    def test_top_level_list_treated_as_empty(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        (data_dir / "default-user.json").write_text("[1, 2, 3]", encoding="utf-8")

        backend = FileBackend(str(data_dir))
        assert backend.query_records("default-user") == []
        assert backend.get_record(RecordKey("default-user", "T1")) is None

    def test_invalid_json_raises_and_is_kept(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        path = data_dir / "default-user.json"
        path.write_text("{not json", encoding="utf-8")

        backend = FileBackend(str(data_dir))
        with pytest.raises(StorageError):
            backend.query_records("default-user")
        with pytest.raises(StorageError):
            backend.put_record(_item("T1"))
        assert path.read_text(encoding="utf-8") == "{not json"


class TestSupabaseBackend:
    """Tests for SupabaseBackend with a mocked client."""

    @pytest.fixture
    def mock_client(self):
        return MagicMock()

    @pytest.fixture
    def backend(self, mock_client):
        from coffeelog.storage.supabase_backend import SupabaseBackend
        return SupabaseBackend(table_name="coffee_intake", client=mock_client)

    def test_get_record_maps_columns(self, backend, mock_client):
        select_chain = mock_client.table.return_value.select.return_value.eq.return_value.eq.return_value
        select_chain.execute.return_value = MagicMock(data=[{
            "user_id": "u", "timestamp": "T1", "amount": 200, "unit": "ml",
            "rating": None, "location": "Office",
        }])

        item = backend.get_record(RecordKey("u", "T1"))

        assert item == {"userId": "u", "timestamp": "T1", "amount": 200, "unit": "ml", "location": "Office"}
        mock_client.table.assert_called_with("coffee_intake")

    def test_get_record_missing(self, backend, mock_client):
        select_chain = mock_client.table.return_value.select.return_value.eq.return_value.eq.return_value
        select_chain.execute.return_value = MagicMock(data=[])

        assert backend.get_record(RecordKey("u", "T1")) is None

    def test_update_sends_only_assignments(self, backend, mock_client):
        table = mock_client.table.return_value
        table.update.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=[{
            "user_id": "u", "timestamp": "T1", "amount": 200, "unit": "ml",
            "rating": 5, "location": None,
        }])

        instruction = build_update_instruction(RecordKey("u", "T1"), Patch(rating=5))
        item = backend.update_record(instruction)

        table.update.assert_called_once_with({"rating": 5})
        table.update.return_value.eq.assert_called_once_with("user_id", "u")
        assert item["rating"] == 5
        assert "location" not in item

    def test_update_no_rows_is_not_found(self, backend, mock_client):
        table = mock_client.table.return_value
        table.update.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=[])

        instruction = build_update_instruction(RecordKey("u", "T1"), Patch(rating=5))
        with pytest.raises(NotFoundError):
            backend.update_record(instruction)

    def test_put_record_inserts_row(self, backend, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(data=[])

        backend.put_record({"userId": "u", "timestamp": "T1", "amount": 2, "unit": "cups"})

        table.insert.assert_called_once_with(
            {"user_id": "u", "timestamp": "T1", "amount": 2, "unit": "cups"}
        )

    def test_put_existing_record_conflicts(self, backend, mock_client):
        table = mock_client.table.return_value
        table.select.return_value.eq.return_value.eq.return_value.execute.return_value = MagicMock(
            data=[{"user_id": "u", "timestamp": "T1", "amount": 2, "unit": "cups"}]
        )

        with pytest.raises(ConflictError):
            backend.put_record({"userId": "u", "timestamp": "T1", "amount": 2, "unit": "cups"})
        table.insert.assert_not_called()

    def test_query_orders_newest_first(self, backend, mock_client):
        chain = mock_client.table.return_value.select.return_value.eq.return_value
        chain.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[])

        assert backend.query_records("u", limit=10) == []
        chain.order.assert_called_once_with("timestamp", desc=True)
        chain.order.return_value.limit.assert_called_once_with(10)

    def test_requires_credentials_without_client(self, monkeypatch):
        from coffeelog.storage.supabase_backend import SupabaseBackend
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_KEY", raising=False)

        with pytest.raises(ValueError):
            SupabaseBackend()


class TestStoreFactory:
    """Tests for create_store."""

    def test_file_backend_default(self, tmp_path):
        store = create_store(Settings(data_dir=str(tmp_path / "data")))
        assert store.backend_type == "file"

    def test_memory_backend(self):
        store = create_store(Settings(storage_backend="memory"))
        assert store.backend_type == "memory"

    def test_force_backend(self, tmp_path):
        store = create_store(Settings(data_dir=str(tmp_path)), force_backend="memory")
        assert isinstance(store, MemoryBackend)

    def test_supabase_backend_uses_given_client(self):
        mock_client = MagicMock()
        store = create_store(Settings(storage_backend="supabase"), supabase_client=mock_client)
        assert store.backend_type == "supabase"

    def test_supabase_default_table_matches_backend(self):
        from coffeelog.storage.supabase_backend import DEFAULT_TABLE
        mock_client = MagicMock()
        chain = mock_client.table.return_value.select.return_value.eq.return_value
        chain.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[])

        store = create_store(Settings(storage_backend="supabase"), supabase_client=mock_client)
        store.query_records("default-user")

        assert DEFAULT_TABLE == "coffee_intake"
        mock_client.table.assert_called_once_with(DEFAULT_TABLE)

    def test_supabase_configured_table(self):
        mock_client = MagicMock()
        chain = mock_client.table.return_value.select.return_value.eq.return_value
        chain.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[])

        store = create_store(Settings(storage_backend="supabase", table_name="coffee_dev"),
                             supabase_client=mock_client)
        store.query_records("default-user")

        mock_client.table.assert_called_once_with("coffee_dev")

    @patch('coffeelog.storage.supabase_backend.create_client')
    def test_supabase_backend_from_settings(self, mock_create_client):
        settings = Settings(
            storage_backend="supabase",
            supabase_url="https://test.supabase.co",
            supabase_key="test-key",
        )
        create_store(settings)
        mock_create_client.assert_called_once_with("https://test.supabase.co", "test-key")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_store(Settings(storage_backend="dynamo"))
