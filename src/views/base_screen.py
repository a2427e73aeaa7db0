import asyncio

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from db.crud import cart_count, cart_subtotal, list_cart
from utils.messages import AdminLogoutMessage, ModeSwitchedMessage
from utils.pure import format_currency, generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # mount and screen resume both refresh; the menu must not be built twice at once
        self._refresh_lock = asyncio.Lock()

    def compose(self) -> ComposeResult:
        yield Label("Your Cart", id="label-info-1")
        yield Markdown("", id="md-cartinfo")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")
        yield Button("Log out", id="btn-logout", variant="error")

    async def on_mount(self):
        self.init_mode = self.app.current_mode
        await self.refresh_info()

    async def refresh_info(self) -> None:
        """Rebuild cart summary and menu; the menu depends on the admin flag."""
        async with self._refresh_lock:
            await self._rebuild()

    async def _rebuild(self) -> None:
        items = await list_cart(self.app.state.store)
        table_rows = [
            ["Items", cart_count(items)],
            ["Subtotal", format_currency(cart_subtotal(items))],
        ]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "r"])
        await self.query_one("#md-cartinfo", Markdown).update(md_table_str)

        modes = dict(self.app.CUSTOMER_MODES)
        if self.app.state.is_admin:
            modes.update(self.app.ADMIN_MODES)
        else:
            modes["admin_login"] = "Staff Login"

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in modes.items()]
        )
        self.query_one("#btn-logout").display = self.app.state.is_admin
        self.highlight_item(self.init_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(AdminLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    # screens that send signed-out visitors to the staff login
    ADMIN_ONLY = False

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Base Screen",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        :return:
        """

        self.app.title = "OBRA Office Furniture"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                if k in self.app.ADMIN_MODES:
                    self.sub_title = self.app.ADMIN_MODES[k]
                elif k in self.app.CUSTOMER_MODES:
                    self.sub_title = self.app.CUSTOMER_MODES[k]

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(ScreenResume)
    async def refresh_sidebar(self) -> None:
        if self._show_sidebar:
            for sidebar in self.query(Sidebar):
                await sidebar.refresh_info()

    def admin_locked_out(self) -> bool:
        """Redirect to the login screen when an admin screen is shown signed out."""
        if not self.ADMIN_ONLY or self.app.state.is_admin:
            return False
        self.notify("Please sign in as staff first.", severity="warning")
        self.post_message(ModeSwitchedMessage(self.app.current_mode, "admin_login"))
        self.app.switch_mode("admin_login")
        return True

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
