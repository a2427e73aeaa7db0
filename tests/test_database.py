import os
import tempfile
import unittest

from db import crud
from db.database import MemoryStore, SqliteStore


class SqliteStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # nested folder checks that the store creates it
        self.db_path = os.path.join(self.temp_dir.name, "data", "test.sqlite")
        self.store = SqliteStore(self.db_path)

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_get_set_remove_keys(self):
        self.assertIsNone(await self.store.get("missing"))
        self.assertTrue(os.path.exists(self.db_path))

        await self.store.set("b", '{"x": 1}')
        await self.store.set("a", "[]")
        await self.store.set("b", '{"x": 2}')
        self.assertEqual(await self.store.get("b"), '{"x": 2}')
        self.assertEqual(await self.store.keys(), ["a", "b"])

        await self.store.remove("b")
        await self.store.remove("never-there")
        self.assertEqual(await self.store.keys(), ["a"])

    async def test_data_survives_new_store_instance(self):
        await crud.init_store(self.store)
        prod = await crud.get_product(self.store, "obra-et-001")
        await crud.add_to_cart(self.store, prod)

        reopened = SqliteStore(self.db_path)
        items = await crud.list_cart(reopened)
        self.assertEqual([i.pid for i in items], [prod.id])
        self.assertEqual(
            len(await crud.list_products(reopened)),
            len(await crud.list_products(self.store)),
        )


class MemoryStoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_initial_data_is_copied(self):
        initial = {"k": "v"}
        store = MemoryStore(initial)
        await store.set("k", "w")
        self.assertEqual(initial, {"k": "v"})
        self.assertEqual(await store.get("k"), "w")
        await store.remove("k")
        self.assertEqual(await store.keys(), [])
