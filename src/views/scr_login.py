from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label

from utils.messages import AdminLoginMessage, ModeSwitchedMessage
from views.base_screen import BaseScreen


class LoginScreen(BaseScreen):
    """
    Staff sign-in. Credentials are checked against the stored ones,
    the flag it sets is advisory only.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Staff Login")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("Admin Access")
            yield Label("Username")
            yield Input(placeholder="Username", id="input-login-user")
            yield Label("Password")
            yield Input(placeholder="*********", password=True, id="input-login-pwd")
            yield Label("", id="label-login-error")
            with Horizontal(id="div-login-btns"):
                yield Button("Sign in", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-user").focus()

    @on(Input.Submitted, "#input-login-pwd")
    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        username = self.query_one("#input-login-user", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        if not username or not pwd:
            self.notify("Username or password cannot be empty!", severity="error")
            return

        if await self.app.state.login(username, pwd):
            self.query_one("#label-login-error", Label).update("")
            self.notify(f"Welcome, {username}!")
            self.app.post_message(AdminLoginMessage())
            self.app.post_message(
                ModeSwitchedMessage(self.app.current_mode, "admin_products")
            )
            await self.app.switch_mode("admin_products")
        else:
            self.query_one("#label-login-error", Label).update("Invalid credentials")
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
