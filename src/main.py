from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from utils.logger import get_logger
from utils.messages import (
    AdminLoginMessage,
    AdminLogoutMessage,
    ModeSwitchedMessage,
    QuitRequestedMessage,
)
from utils.state import GlobalState
from views.scr_admin_products import AdminProductsScreen
from views.scr_admin_quotes import AdminQuotesScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen

_logger = get_logger(__name__)


class CatalogApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "admin_login": LoginScreen,
        "admin_products": AdminProductsScreen,
        "admin_quotes": AdminQuotesScreen,
    }

    ADMIN_MODES = {"admin_products": "Products", "admin_quotes": "Quotations"}
    CUSTOMER_MODES = {
        "catalog": "Catalog",
        "cart": "Cart",
    }

    CSS_PATH = [
        "views/styles/index.tcss",
        "views/styles/catalog.tcss",
        "views/styles/cart.tcss",
        "views/styles/admin.tcss",
    ]

    state: GlobalState

    def __init__(self, state: GlobalState | None = None):
        super().__init__()
        self.state = state or GlobalState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(AdminLogoutMessage)
    @work
    async def handle_admin_logout(self):
        await self.state.logout()
        self.notify("Logout successful.")
        self.post_message(ModeSwitchedMessage(self.current_mode, "catalog"))
        await self.switch_mode("catalog")

    @on(AdminLoginMessage)
    def handle_admin_login(self):
        _logger.info("Admin signed in.")

    @on(ModeSwitchedMessage)
    def handle_mode_switched(self, message: ModeSwitchedMessage):
        _logger.debug(f"Mode {message.old_mode} -> {message.new_mode}")

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self):
        await self.state.load()
        _logger.debug(f"Store ready, admin session: {self.state.is_admin}")
        start = "admin_products" if self.state.is_admin else "catalog"
        self.post_message(ModeSwitchedMessage(self.current_mode, start))
        await self.switch_mode(start)


def run() -> None:
    CatalogApp().run()


if __name__ == "__main__":
    run()
