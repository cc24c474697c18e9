"""Compose form widget: recipient, message, movie and the share button."""

from __future__ import annotations

from textual.containers import VerticalScroll
from textual.widgets import Button, Input, Label, Static, TextArea

from filmfess.controllers.composer import DraftSnapshot
from filmfess.tui.messages import DraftEdited, SubmitRequested
from filmfess.tui.widgets.movie_picker import MoviePicker

COMPOSE_PICKER_ID = "compose-picker"


class ComposeForm(VerticalScroll):
    """Form for a new anonymous confession.

    Renders a DraftSnapshot; text edits and the share button are reported as
    DraftEdited / SubmitRequested messages.
    """

    DEFAULT_CSS = """
    ComposeForm {
        padding: 1 2;
    }
    ComposeForm .form-title {
        text-style: bold;
    }
    ComposeForm .form-intro {
        color: $text-muted;
        margin: 0 0 1 0;
    }
    ComposeForm TextArea {
        height: 8;
    }
    ComposeForm #compose-counter {
        color: $text-muted;
    }
    ComposeForm #compose-feedback {
        height: auto;
        margin: 1 0;
    }
    """

    def __init__(self) -> None:
        super().__init__(id="create")
        self._snapshot = DraftSnapshot()

    def compose(self):
        yield Static("Share Your Story", classes="form-title")
        yield Static(
            "Your confession will be posted anonymously. "
            "Choose a movie that captures your feelings.",
            classes="form-intro",
        )
        yield Label("To")
        yield Input(placeholder="Their name...", id="compose-recipient")
        yield Label("Your Message")
        yield TextArea(id="compose-message")
        yield Static("", id="compose-counter")
        yield Label("Choose a Movie")
        yield MoviePicker(id=COMPOSE_PICKER_ID)
        yield Static("", id="compose-feedback")
        yield Button("Share Anonymously", id="compose-submit", variant="primary")

    def on_mount(self) -> None:
        self.render_snapshot(self._snapshot)

    def render_snapshot(self, snapshot: DraftSnapshot) -> None:
        self._snapshot = snapshot
        if not self.is_mounted:
            return

        recipient = self.query_one("#compose-recipient", Input)
        if recipient.value != snapshot.recipient:
            recipient.value = snapshot.recipient

        message = self.query_one("#compose-message", TextArea)
        if message.text != snapshot.message:
            message.load_text(snapshot.message)

        self.query_one("#compose-counter", Static).update(snapshot.counter)
        self.query_one(f"#{COMPOSE_PICKER_ID}", MoviePicker).render_snapshot(snapshot.movie_lookup)

        feedback = snapshot.validation_error or snapshot.submit_error or snapshot.notice or ""
        self.query_one("#compose-feedback", Static).update(feedback)

        button = self.query_one("#compose-submit", Button)
        button.disabled = snapshot.is_submitting
        button.label = "Sharing..." if snapshot.is_submitting else "Share Anonymously"

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "compose-recipient":
            return
        event.stop()
        # Compare the live value: a queued echo of an earlier sync is stale
        value = event.input.value
        if value == self._snapshot.recipient:
            return
        self.post_message(DraftEdited(field="recipient", value=value))

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        event.stop()
        text = event.text_area.text
        if text == self._snapshot.message:
            return
        self.post_message(DraftEdited(field="message", value=text))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "compose-submit":
            event.stop()
            self.post_message(SubmitRequested())
