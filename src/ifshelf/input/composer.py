"""Assemble player commands from quick-command taps and free text.

The player may tap a verb and then type its object, or type an object first
and finish with a verb tap. In the second case the command is complete as
soon as the verb arrives and is sent to the engine right away. A further tap
while a verb is pending starts the buffer over with the new fragment.
"""

from __future__ import annotations

import logging

from ifshelf.config.models import InputSettings

from .commands import QuickCommandDefinition
from .keys import ControlCode, Direction, EngineDispatcher

LOGGER = logging.getLogger(__name__)


class CommandComposer:
    """Command-line buffer that turns fragment selections into engine input."""

    def __init__(self, dispatcher: EngineDispatcher, *, terminator: str = "\n") -> None:
        """Initialize an empty composer.

        Args:
            dispatcher: Engine-facing capability receiving finished commands.
            terminator: Text appended to every dispatched command.
        """
        self._dispatcher = dispatcher
        self._terminator = terminator
        self._text = ""
        self._verb_chosen = False

    @classmethod
    def from_settings(
        cls, dispatcher: EngineDispatcher, settings: InputSettings | None = None
    ) -> CommandComposer:
        """Build a composer using the configured command terminator."""
        settings = settings or InputSettings()
        return cls(dispatcher, terminator=settings.terminator)

    @property
    def text(self) -> str:
        """Return the current command-line buffer."""
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value

    @property
    def verb_chosen(self) -> bool:
        return self._verb_chosen

    def reset(self) -> None:
        """Clear the buffer and forget any chosen verb."""
        self._text = ""
        self._verb_chosen = False

    def select_fragment(self, definition: QuickCommandDefinition) -> bool:
        """Apply a quick-command tap.

        Args:
            definition: Button that was tapped.

        Returns:
            bool: True when the tap resulted in a command being sent to the engine.
        """
        fragment = definition.cmd.strip()
        if definition.at_once:
            self._send(definition.cmd + self._terminator)
            return True

        pending_object = "" if self._verb_chosen else self._text.strip()
        self._text = f"{fragment} {pending_object}"
        self._verb_chosen = True
        if pending_object:
            self.dispatch()
            return True
        return False

    def append_word(self, word: str) -> None:
        """Append a word to the buffer, separated by a single space."""
        word = word.strip()
        if not word:
            return
        self._text = f"{self._text.strip()} {word}".lstrip()

    def remove_last_word(self) -> None:
        """Drop the rightmost word; clearing the last word resets the composer."""
        trimmed = self._text.strip()
        idx = trimmed.rfind(" ")
        if idx > 0:
            self._text = trimmed[:idx].rstrip()
        else:
            self.reset()

    def dispatch(self) -> None:
        """Send the buffer to the engine and start over."""
        command = self._text + self._terminator
        try:
            self._send(command)
        finally:
            self.reset()

    def submit(self) -> None:
        """Send a bare ENTER, as the "forwards" button does in keypress mode."""
        self.send_key(ControlCode.ENTER)

    def directional_shortcut(self, direction: Direction | str) -> None:
        """Send the cursor control code for ``direction`` without composing."""
        self._dispatcher.execute_command(Direction(direction).code.to_keys())

    def send_key(self, key: ControlCode | str) -> None:
        """Send a single keypress straight to the engine.

        Raises:
            ValueError: If ``key`` is a string that is not exactly one character.
        """
        if isinstance(key, ControlCode):
            keys = key.to_keys()
        elif len(key) == 1:
            keys = [key]
        else:
            raise ValueError(f"Expected a single character, got {key!r}.")
        self._dispatcher.execute_command(keys)

    def _send(self, command: str) -> None:
        LOGGER.debug("Dispatching %r", command)
        self._dispatcher.execute_command(list(command))


__all__ = ["CommandComposer"]
