"""Movie picker: type-ahead input with a candidate list and selected-movie line.

The widget holds no search logic. It renders a LookupSnapshot and reports
edits, choices and clears as messages; the debounce and staleness rules live
in the LookupController behind it.
"""

from __future__ import annotations

from rich.text import Text
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, OptionList, Static
from textual.widgets.option_list import Option

from filmfess.controllers.lookup import LookupSnapshot
from filmfess.models import MovieCandidate
from filmfess.tui.messages import MovieChosen, MovieCleared, MovieQueryEdited


def candidate_prompt(candidate: MovieCandidate) -> Text:
    """Two-line option label: title, then release year (or N/A)."""
    text = Text(candidate.title, style="bold")
    text.append(f"\n{candidate.display_year}", style="dim")
    return text


class MoviePicker(Vertical):
    """Search box plus candidate list for choosing one movie."""

    DEFAULT_CSS = """
    MoviePicker {
        height: auto;
    }
    MoviePicker OptionList {
        max-height: 12;
    }
    MoviePicker .picker-status {
        color: $text-muted;
        height: auto;
    }
    MoviePicker .picker-selection {
        height: auto;
        align-vertical: middle;
    }
    """

    def __init__(self, *, id: str, placeholder: str = "Search for a movie...") -> None:
        super().__init__(id=id)
        self._placeholder = placeholder
        self._snapshot = LookupSnapshot()

    def compose(self):
        yield Input(placeholder=self._placeholder, id=f"{self.id}-input")
        yield Static("", classes="picker-status", id=f"{self.id}-status")
        yield OptionList(id=f"{self.id}-options")
        with Horizontal(classes="picker-selection", id=f"{self.id}-selection"):
            yield Static("", id=f"{self.id}-selected")
            yield Button("Clear", id=f"{self.id}-clear", variant="default")

    def on_mount(self) -> None:
        self.render_snapshot(self._snapshot, force=True)

    @property
    def snapshot(self) -> LookupSnapshot:
        return self._snapshot

    def render_snapshot(self, snapshot: LookupSnapshot, *, force: bool = False) -> None:
        """Bring the widget in line with the lookup session."""
        previous = self._snapshot
        self._snapshot = snapshot
        if not self.is_mounted:
            return

        box = self.query_one(f"#{self.id}-input", Input)
        if box.value != snapshot.query_text:
            box.value = snapshot.query_text

        status = self.query_one(f"#{self.id}-status", Static)
        status.update("Searching..." if snapshot.is_searching else "")

        options = self.query_one(f"#{self.id}-options", OptionList)
        if force or snapshot.candidates != previous.candidates:
            options.clear_options()
            options.add_options(
                [Option(candidate_prompt(c), id=str(i)) for i, c in enumerate(snapshot.candidates)]
            )
        options.display = bool(snapshot.candidates) and not snapshot.has_selection

        selection_row = self.query_one(f"#{self.id}-selection", Horizontal)
        selection_row.display = snapshot.has_selection
        if snapshot.selection is not None:
            label = Text(snapshot.selection.title, style="bold")
            label.append("  Selected", style="italic")
            self.query_one(f"#{self.id}-selected", Static).update(label)

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        # Programmatic syncs from render_snapshot echo back the session's own text
        value = event.input.value
        if value == self._snapshot.query_text:
            return
        self.post_message(MovieQueryEdited(picker_id=self.id or "", text=value))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        index = event.option_index
        if 0 <= index < len(self._snapshot.candidates):
            candidate = self._snapshot.candidates[index]
            self.post_message(MovieChosen(picker_id=self.id or "", candidate=candidate))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == f"{self.id}-clear":
            event.stop()
            self.post_message(MovieCleared(picker_id=self.id or ""))
