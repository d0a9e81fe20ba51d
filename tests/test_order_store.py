"""Tests for the order stores (app.services.orders)."""

import asyncio
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from app.exceptions import OrderNotFoundError, PersistenceError, PersistenceTimeoutError
from app.services.orders import (
    MockOrderStore,
    MongoOrderStore,
    get_order_store,
    reset_order_store,
)


def run(coro):
    return asyncio.run(coro)


class TestMockOrderStore:
    def test_insert_fills_missing_fields(self):
        store = MockOrderStore(timeout=1.0)

        result = run(store.insert_order({"dish": "Soup"}))
        order = run(store.find_order(result.inserted_id))

        assert order == {
            "_id": result.inserted_id,
            "dish": "Soup",
            "price": None,
            "server": None,
            "table": None,
        }

    def test_unknown_fields_are_not_stored(self):
        store = MockOrderStore(timeout=1.0)

        result = run(store.insert_order({"dish": "Soup", "tip": 3}))

        assert "tip" not in run(store.find_order(result.inserted_id))

    def test_returned_documents_are_copies(self):
        store = MockOrderStore(timeout=1.0)
        result = run(store.insert_order({"dish": "Soup"}))

        run(store.find_order(result.inserted_id))["dish"] = "Changed"
        run(store.find_orders())[0]["dish"] = "Changed"

        assert run(store.find_order(result.inserted_id))["dish"] == "Soup"

    def test_find_orders_filters_by_server(self):
        store = MockOrderStore(timeout=1.0)
        alice = run(store.insert_order({"server": "Alice"})).inserted_id
        run(store.insert_order({"server": "Bob"}))
        run(store.insert_order({}))

        assert [o["_id"] for o in run(store.find_orders(server="Alice"))] == [alice]
        assert len(run(store.find_orders())) == 3

    def test_find_missing_order_raises(self):
        store = MockOrderStore(timeout=1.0)

        with pytest.raises(OrderNotFoundError):
            run(store.find_order(ObjectId()))

    def test_update_waiter_counts(self):
        store = MockOrderStore(timeout=1.0)
        order_id = run(store.insert_order({"dish": "Soup", "server": "Alice"})).inserted_id

        changed = run(store.update_waiter(order_id, "Bob"))
        unchanged = run(store.update_waiter(order_id, "Bob"))
        missing = run(store.update_waiter(ObjectId(), "Bob"))

        assert (changed.matched_count, changed.modified_count) == (1, 1)
        assert (unchanged.matched_count, unchanged.modified_count) == (1, 0)
        assert (missing.matched_count, missing.modified_count) == (0, 0)
        assert run(store.find_order(order_id))["dish"] == "Soup"

    def test_replace_keeps_id_and_clears_omitted_fields(self):
        store = MockOrderStore(timeout=1.0)
        order_id = run(store.insert_order({"dish": "Soup", "price": 4.5, "server": "Alice"})).inserted_id

        result = run(store.replace_order(order_id, {"table": "T3"}))

        assert result.modified_count == 1
        assert run(store.find_order(order_id)) == {
            "_id": order_id,
            "dish": None,
            "price": None,
            "server": None,
            "table": "T3",
        }

    def test_delete_counts(self):
        store = MockOrderStore(timeout=1.0)
        order_id = run(store.insert_order({"dish": "Soup"})).inserted_id

        assert run(store.delete_order(order_id)).deleted_count == 1
        assert run(store.delete_order(order_id)).deleted_count == 0

    def test_slow_operation_times_out(self):
        store = MockOrderStore(timeout=0.01, latency=0.2)

        with pytest.raises(PersistenceTimeoutError) as exc_info:
            run(store.insert_order({"dish": "Soup"}))

        assert exc_info.value.operation == "insert_order"

    def test_simulated_failure(self):
        store = MockOrderStore(timeout=1.0, failure_rate=1.0)

        with pytest.raises(PersistenceError):
            run(store.find_orders())

    def test_default_timeout_comes_from_settings(self):
        assert MockOrderStore().timeout == 100.0


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    async def to_list(self):
        return list(self.documents)


class FakeCollection:
    """Records the calls MongoOrderStore makes; returns canned driver results."""

    full_name = "restaurant.orders"

    def __init__(self, documents=(), error=None, delay=0.0):
        self.documents = list(documents)
        self.error = error
        self.delay = delay
        self.calls = []
        self.database = SimpleNamespace(command=self._command)

    async def _respond(self, name, *args, result=None):
        self.calls.append((name, *args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return result

    async def _command(self, name):
        return await self._respond("command", name, result={"ok": 1})

    async def insert_one(self, document):
        return await self._respond(
            "insert_one", document, result=SimpleNamespace(inserted_id=document["_id"])
        )

    def find(self, query):
        self.calls.append(("find", query))
        return FakeCursor(d for d in self.documents if all(d.get(k) == v for k, v in query.items()))

    async def find_one(self, query):
        match = next((d for d in self.documents if d["_id"] == query["_id"]), None)
        return await self._respond("find_one", query, result=match)

    async def update_one(self, query, update):
        return await self._respond(
            "update_one", query, update, result=SimpleNamespace(matched_count=1, modified_count=1)
        )

    async def replace_one(self, query, replacement):
        return await self._respond(
            "replace_one", query, replacement, result=SimpleNamespace(matched_count=1, modified_count=0)
        )

    async def delete_one(self, query):
        return await self._respond("delete_one", query, result=SimpleNamespace(deleted_count=0))


class TestMongoOrderStore:
    def test_insert_generates_id_and_all_fields(self):
        collection = FakeCollection()
        store = MongoOrderStore(collection=collection, timeout=1.0)

        result = run(store.insert_order({"dish": "Soup", "price": 4.5}))

        (name, document), = collection.calls
        assert name == "insert_one"
        assert document == {
            "_id": result.inserted_id,
            "dish": "Soup",
            "price": 4.5,
            "server": None,
            "table": None,
        }

    def test_find_orders_queries(self):
        alice = {"_id": ObjectId(), "server": "Alice"}
        collection = FakeCollection(documents=[alice, {"_id": ObjectId(), "server": "Bob"}])
        store = MongoOrderStore(collection=collection, timeout=1.0)

        assert run(store.find_orders(server="Alice")) == [alice]
        assert len(run(store.find_orders())) == 2
        assert collection.calls == [("find", {"server": "Alice"}), ("find", {})]

    def test_find_order_not_found(self):
        store = MongoOrderStore(collection=FakeCollection(), timeout=1.0)

        with pytest.raises(OrderNotFoundError):
            run(store.find_order(ObjectId()))

    def test_update_waiter_sets_server_only(self):
        collection = FakeCollection()
        store = MongoOrderStore(collection=collection, timeout=1.0)
        order_id = ObjectId()

        result = run(store.update_waiter(order_id, "Bob"))

        assert collection.calls == [("update_one", {"_id": order_id}, {"$set": {"server": "Bob"}})]
        assert result.modified_count == 1

    def test_replace_sends_every_field_but_id(self):
        collection = FakeCollection()
        store = MongoOrderStore(collection=collection, timeout=1.0)
        order_id = ObjectId()

        result = run(store.replace_order(order_id, {"dish": "Cake", "_id": ObjectId()}))

        assert collection.calls == [
            ("replace_one", {"_id": order_id}, {"dish": "Cake", "price": None, "server": None, "table": None})
        ]
        assert result.modified_count == 0

    def test_delete(self):
        collection = FakeCollection()
        store = MongoOrderStore(collection=collection, timeout=1.0)
        order_id = ObjectId()

        assert run(store.delete_order(order_id)).deleted_count == 0
        assert collection.calls == [("delete_one", {"_id": order_id})]

    def test_driver_errors_become_persistence_errors(self):
        error = ServerSelectionTimeoutError("no servers")
        store = MongoOrderStore(collection=FakeCollection(error=error), timeout=1.0)

        with pytest.raises(PersistenceError) as exc_info:
            run(store.delete_order(ObjectId()))

        assert exc_info.value.__cause__ is error

    def test_slow_driver_times_out(self):
        store = MongoOrderStore(collection=FakeCollection(delay=0.2), timeout=0.01)

        with pytest.raises(PersistenceTimeoutError):
            run(store.update_waiter(ObjectId(), "Bob"))

    def test_health_check(self):
        healthy = MongoOrderStore(collection=FakeCollection(), timeout=1.0)
        broken = MongoOrderStore(collection=FakeCollection(error=ServerSelectionTimeoutError("down")), timeout=1.0)

        assert run(healthy.health_check()) is True
        assert run(broken.health_check()) is False
        assert healthy.provider_name == "mongo"


class TestOrderStoreFactory:
    def test_development_uses_mock_store(self):
        reset_order_store()
        try:
            store = get_order_store()
            assert isinstance(store, MockOrderStore)
            assert get_order_store() is store
        finally:
            reset_order_store()

    def test_reset_creates_new_instance(self):
        reset_order_store()
        try:
            first = get_order_store()
            reset_order_store()
            assert get_order_store() is not first
        finally:
            reset_order_store()
