import unittest

from db.database import MemoryStore
from main import CatalogApp
from utils.state import GlobalState


class AdminScreenAccessTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.app = CatalogApp(GlobalState(store=MemoryStore()))

    async def _started(self, pilot) -> None:
        # main_flow seeds the store and picks the first mode
        await self.app.workers.wait_for_complete()
        await pilot.pause()

    async def test_signed_out_admin_screens_redirect_to_login(self):
        async with self.app.run_test() as pilot:
            await self._started(pilot)
            self.assertEqual(self.app.current_mode, "catalog")

            for mode in ("admin_products", "admin_quotes"):
                await self.app.switch_mode(mode)
                await pilot.pause()
                await pilot.pause()
                self.assertEqual(self.app.current_mode, "admin_login")

    async def test_signed_in_admin_stays_on_admin_screen(self):
        async with self.app.run_test() as pilot:
            await self._started(pilot)
            self.assertTrue(await self.app.state.login("admin", "adminadmin"))

            await self.app.switch_mode("admin_products")
            await pilot.pause()
            await pilot.pause()
            self.assertEqual(self.app.current_mode, "admin_products")
