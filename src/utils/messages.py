from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class AdminLoginMessage(Message):
    """
    Fired when the admin signed in; the sidebar menu is rebuilt on screen resume
    """

    bubble = True


class AdminLogoutMessage(Message):
    """
    broadcasted when the admin logs out
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever the cart is mutated (catalog add, cart edits, checkout).
    Refreshes the cart screen and the item count in the sidebar.
    """

    bubble = True


class ProductsChangedMessage(Message):
    """
    Fired after the admin saved, deleted or bulk-edited products.
    The catalog listens to it to reload.
    """

    bubble = True


class NewQuotationMessage(Message):
    """
    Fired when checkout produced a quotation.
    Listened to by the admin quotation list.
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    Fired whenever switch_mode is called, the app logs the transition.
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
