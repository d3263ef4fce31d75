"""Modal asking for a profile's password before connecting."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Static


class PasswordPrompt(ModalScreen[str | None]):
    """Collects a password; dismisses with ``None`` when cancelled."""

    DEFAULT_CSS = """
    PasswordPrompt {
        align: center middle;
    }

    PasswordPrompt > Vertical {
        width: 60;
        height: auto;
        border: round $primary;
        padding: 1 2;
        background: $surface;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, profile_name: str) -> None:
        super().__init__()
        self._profile_name = profile_name

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(f"Enter password for {self._profile_name}:")
            yield Input(password=True, id="password-input")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


__all__ = ["PasswordPrompt"]
