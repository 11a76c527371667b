"""
Interactive Menu Shell

Single-threaded, synchronous menu loop over text streams.  Each iteration
prints the numbered menu, reads one choice, collects the arguments the
chosen operation needs, calls the ``SignalStore``, and prints a
confirmation or error.  Domain errors never leave the current iteration.

The loop ends on the Exit choice, or when the input stream is exhausted.

Package Location: src/trafficreg/shell.py
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, Optional, TextIO

from .data.store import DuplicateIdError, NotFoundError, SignalStore
from .records.models import TrafficRegError, format_record

log = logging.getLogger(__name__)

TITLE = "Smart Traffic Management System"

MENU_OPTIONS: Dict[int, str] = {
    1: "Register a Traffic Signal",
    2: "View All Signals",
    3: "Update Traffic Density",
    4: "Update Signal Timing",
    5: "Delete a Traffic Signal",
    6: "Exit",
}
EXIT_CHOICE = 6

MSG_DUPLICATE   = "Error! Signal ID already exists."
MSG_NOT_FOUND   = "Traffic signal not found!"
MSG_INVALID     = "Invalid choice! Try again."
MSG_NOT_INTEGER = "Please enter a whole number."
MSG_EMPTY       = "No traffic signals registered."
MSG_GOODBYE     = f"Exiting {TITLE}. Thank you!"
MSG_SAVE_FAILED = "Error! Could not save changes; nothing was modified."


class InvalidMenuChoiceError(TrafficRegError):
    """Menu input that is not one of the listed option numbers."""

    def __init__(self, raw: str):
        super().__init__(f"Invalid menu choice: {raw!r}")
        self.raw = raw


def parse_choice(raw: str) -> int:
    """Convert a line of menu input into an option number.

    Args:
        raw: Text typed at the menu prompt.

    Returns:
        Option number in ``MENU_OPTIONS``.

    Raises:
        InvalidMenuChoiceError: Not an integer, or not a listed option.
    """
    try:
        choice = int(raw.strip())
    except ValueError:
        raise InvalidMenuChoiceError(raw) from None
    if choice not in MENU_OPTIONS:
        raise InvalidMenuChoiceError(raw)
    return choice


def render_menu() -> str:
    lines = [f"\n===== {TITLE} ====="]
    lines.extend(f"{num}. {label}" for num, label in MENU_OPTIONS.items())
    return "\n".join(lines)


class InteractiveShell:
    """Numbered-menu front end for a ``SignalStore``.

    Args:
        store:  Loaded store the operator works on.
        stdin:  Input stream (default ``sys.stdin``).
        stdout: Output stream (default ``sys.stdout``).
    """

    def __init__(
        self,
        store: SignalStore,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.store = store
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self._handlers: Dict[int, Callable[[], bool]] = {
            1: self._register,
            2: self._view,
            3: self._update_density,
            4: self._update_timing,
            5: self._delete,
            EXIT_CHOICE: self._exit,
        }

    # ------------------------------------------------------------------
    # Stream helpers
    # ------------------------------------------------------------------

    def _say(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _prompt(self, text: str) -> str:
        """Show ``text`` and return one input line without its terminator.

        Raises:
            EOFError: The input stream is exhausted.
        """
        self.stdout.write(text)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    def _save_failed(self, exc: OSError) -> None:
        log.error("Could not write %s: %s", self.store.path, exc)
        self._say(MSG_SAVE_FAILED)

    def _prompt_int(self, text: str) -> int:
        while True:
            raw = self._prompt(text)
            try:
                return int(raw.strip())
            except ValueError:
                self._say(MSG_NOT_INTEGER)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run the menu loop until Exit is chosen or input runs out."""
        log.info("Shell started", extra={"records": len(self.store)})
        while True:
            self._say(render_menu())
            try:
                raw = self._prompt("Enter your choice: ")
                choice = parse_choice(raw)
            except EOFError:
                self._say()
                break
            except InvalidMenuChoiceError as exc:
                log.debug(str(exc))
                self._say(MSG_INVALID)
                continue

            try:
                keep_going = self._handlers[choice]()
            except EOFError:
                self._say()
                break
            if not keep_going:
                break
        log.info("Shell stopped", extra={"records": len(self.store)})

    # ------------------------------------------------------------------
    # Menu actions; each returns False only to stop the loop
    # ------------------------------------------------------------------

    def _register(self) -> bool:
        signal_id = self._prompt_int("Enter Signal ID: ")
        if signal_id in self.store:
            self._say(MSG_DUPLICATE)
            return True

        location = self._prompt("Enter Location: ")
        density = self._prompt_int("Enter Initial Traffic Density (0-100%): ")
        timing = self._prompt_int("Enter Green Light Duration (in seconds): ")
        try:
            self.store.register(signal_id, location, density, timing)
        except DuplicateIdError:
            self._say(MSG_DUPLICATE)
            return True
        except OSError as exc:
            self._save_failed(exc)
            return True
        self._say("Traffic Signal registered successfully!")
        return True

    def _view(self) -> bool:
        self._say("\n===== Traffic Signals List =====")
        records = self.store.list()
        if not records:
            self._say(MSG_EMPTY)
        for record in records:
            self._say(format_record(record))
        return True

    def _update_density(self) -> bool:
        signal_id = self._prompt_int("Enter Signal ID to update density: ")
        if self.store.find(signal_id) is None:
            self._say(MSG_NOT_FOUND)
            return True
        density = self._prompt_int("Enter New Traffic Density (0-100%): ")
        try:
            self.store.update_density(signal_id, density)
        except NotFoundError:
            self._say(MSG_NOT_FOUND)
            return True
        except OSError as exc:
            self._save_failed(exc)
            return True
        self._say("Traffic density updated successfully!")
        return True

    def _update_timing(self) -> bool:
        signal_id = self._prompt_int("Enter Signal ID to update timing: ")
        if self.store.find(signal_id) is None:
            self._say(MSG_NOT_FOUND)
            return True
        timing = self._prompt_int("Enter New Green Light Duration (in seconds): ")
        try:
            self.store.update_timing(signal_id, timing)
        except NotFoundError:
            self._say(MSG_NOT_FOUND)
            return True
        except OSError as exc:
            self._save_failed(exc)
            return True
        self._say("Signal timing updated successfully!")
        return True

    def _delete(self) -> bool:
        signal_id = self._prompt_int("Enter Signal ID to delete: ")
        try:
            self.store.delete(signal_id)
        except NotFoundError:
            self._say(MSG_NOT_FOUND)
            return True
        except OSError as exc:
            self._save_failed(exc)
            return True
        self._say("Traffic signal deleted successfully!")
        return True

    def _exit(self) -> bool:
        self._say(MSG_GOODBYE)
        return False


def run_shell(
    store: SignalStore,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Build an ``InteractiveShell`` around ``store`` and run it."""
    InteractiveShell(store, stdin=stdin, stdout=stdout).run()
