import asyncio
from typing import Optional

from sticky_notes.core.logging_utils import get_module_logger
from sticky_notes.core.shutdown_coordinator import ShutdownCoordinator
from sticky_notes.notes.collection import NotesCollection
from sticky_notes.notes.content import parse_color
from sticky_notes.notes.controller import NoteController
from sticky_notes.notes.model import COLOR_OPTIONS

COLOR_NAMES = dict(zip(("yellow", "green", "blue", "pink", "purple"), COLOR_OPTIONS))

# Shell command -> NoteController command name
NOTE_COMMANDS = {
    'pin': 'pin',
    'more': 'more',
    'less': 'less',
    'start': 'start',
    'pause': 'pause',
    'reset': 'reset',
    'focus': 'focus',
    'resume': 'resume',
    'endfocus': 'endfocus',
}


class InteractiveShell:
    """
    Interactive command-line shell for Sticky Notes.

    Stands in for a windowed front end: every action goes through the
    same collection and note commands a GUI would bind to.
    """

    def __init__(
        self,
        collection: NotesCollection,
        shutdown_coordinator: Optional[ShutdownCoordinator] = None,
    ):
        self.logger = get_module_logger("InteractiveShell")
        self.collection = collection
        self.shutdown_coordinator = shutdown_coordinator
        self.running = True

    async def run(self) -> None:
        """Run the interactive shell."""
        self.logger.info("Starting interactive shell")
        print("\n" + "=" * 60)
        print("Sticky Notes - Interactive CLI")
        print("=" * 60)
        print("Type 'help' for available commands, 'quit' to exit")
        print("=" * 60 + "\n")

        await self._cmd_list()

        while self.running and not self._shutting_down():
            try:
                line = await asyncio.get_running_loop().run_in_executor(
                    None,
                    lambda: input("\nnotes> ").strip()
                )

                if not line or self._shutting_down():
                    continue

                await self._execute_command(line)

            except EOFError:
                print("\nEOF received, shutting down...")
                break
            except KeyboardInterrupt:
                print("\n\nInterrupt received. Type 'quit' to exit.")
                continue
            except Exception as e:
                self.logger.error("Command error: %s", e, exc_info=True)
                print(f"Error: {e}")

        self.logger.info("Interactive shell exiting")

    def _shutting_down(self) -> bool:
        coordinator = self.shutdown_coordinator
        return coordinator is not None and (coordinator.is_shutting_down or coordinator.is_complete)

    async def _execute_command(self, line: str) -> None:
        """Parse and execute a command line."""
        parts = line.split()
        if not parts:
            return

        cmd = parts[0].lower()
        args = parts[1:]

        commands = {
            'help': self._cmd_help,
            'list': self._cmd_list,
            'status': self._cmd_status,
            'new': self._cmd_new,
            'select': self._cmd_select,
            'delete': self._cmd_delete,
            'text': self._cmd_text,
            'color': self._cmd_color,
            'move': self._cmd_move,
            'resize': self._cmd_resize,
            'duration': self._cmd_duration,
            'search': self._cmd_search,
            'save': self._cmd_save,
            'quit': self._cmd_quit,
            'exit': self._cmd_quit,
        }

        if cmd in NOTE_COMMANDS:
            await self._run_note_command(NOTE_COMMANDS[cmd])
            return

        handler = commands.get(cmd)
        if handler:
            await handler(args)
        else:
            print(f"Unknown command: {cmd}")
            print("Type 'help' for available commands")

    async def _cmd_help(self, args=None) -> None:
        """Show help."""
        print("\nAvailable Commands:")
        print("-" * 60)
        print("  help                 - Show this help message")
        print("  list                 - List notes matching the search")
        print("  status               - Show the selected note")
        print("  new                  - Create and select a new note")
        print("  select <n>           - Select note number n")
        print("  delete               - Delete the selected note")
        print("  text <words...>      - Replace the selected note's text")
        print("  color <hex|name>     - Set colour (yellow, green, blue, pink, purple)")
        print("  pin                  - Toggle always-on-top")
        print("  move <left> <top>    - Move the selected note")
        print("  resize <w> <h>       - Resize the selected note")
        print("  duration <minutes>   - Set the timer length")
        print("  more / less          - Timer length +/- 5 minutes")
        print("  start / pause / reset - Control the countdown")
        print("  focus                - Start or pause a focus session")
        print("  resume / endfocus    - Resume or end a paused session")
        print("  search [text]        - Filter notes (no text clears)")
        print("  save                 - Save all notes now")
        print("  quit / exit          - Save and exit")
        print("-" * 60)

    async def _cmd_list(self, args=None) -> None:
        """List visible notes."""
        notes = self.collection.notes
        visible = self.collection.visible_notes
        search = self.collection.search_text.strip()

        header = f"\nNotes ({len(visible)} of {len(notes)}"
        header += f", search '{search}')" if search else ")"
        print(header + ":")
        print("-" * 60)
        if not visible:
            print("  (none)")
        for index, note in enumerate(notes, 1):
            if note not in visible:
                continue
            marker = "*" if note is self.collection.selected else " "
            pin = "P" if note.is_pinned else " "
            preview = note.preview_text.splitlines()[0] if note.preview_text else ""
            if len(preview) > 32:
                preview = preview[:29] + "..."
            print(
                f" {marker}{index:>3}. [{pin}] {note.color} {note.remaining_display:>8} "
                f"{note.focus_state.value:<7} {preview}"
            )
        print("-" * 60)

    async def _cmd_status(self, args=None) -> None:
        """Show the selected note."""
        note = self._require_selected()
        if note is None:
            return

        print("\nSelected Note:")
        print("-" * 60)
        print(f"  Id:        {note.id}")
        print(f"  Color:     {note.color} (text {note.focus_foreground.name.lower()})")
        print(f"  Pinned:    {'yes' if note.is_pinned else 'no'}")
        print(f"  Geometry:  {note.width:g}x{note.height:g} at ({note.left:g}, {note.top:g})")
        print(f"  Duration:  {note.duration_minutes:g} min")
        print(f"  Remaining: {note.remaining_display} ({'running' if note.is_timer_running else 'stopped'})")
        print(f"  Focus:     {note.focus_state.value} [{note.focus_button_text}]")
        print(f"  Modified:  {note.last_modified.isoformat()}")
        enabled = [name for name, command in note.commands.items() if command.can_execute()]
        print(f"  Available: {', '.join(enabled)}")
        print("-" * 60)

    async def _cmd_new(self, args=None) -> None:
        self.collection.new_note_command.execute()
        print(f"✓ Created note {len(self.collection)}")

    async def _cmd_select(self, args) -> None:
        if not args:
            print("Usage: select <n>")
            return
        try:
            index = int(args[0])
        except ValueError:
            print(f"Error: '{args[0]}' is not a number")
            return
        notes = self.collection.notes
        if not 1 <= index <= len(notes):
            print(f"Error: choose a note between 1 and {len(notes)}")
            return
        self.collection.selected = notes[index - 1]
        print(f"Selected note {index}")

    async def _cmd_delete(self, args=None) -> None:
        if not self.collection.delete_note_command.execute():
            print("delete is not available (no note selected)")
            return
        print("✓ Note deleted")

    async def _cmd_text(self, args) -> None:
        note = self._require_selected()
        if note is None:
            return
        note.set_content(" ".join(args))

    async def _cmd_color(self, args) -> None:
        note = self._require_selected()
        if note is None:
            return
        if not args:
            print(f"Usage: color <hex|{'|'.join(COLOR_NAMES)}>")
            return
        value = COLOR_NAMES.get(args[0].lower(), args[0])
        try:
            parse_color(value)
        except ValueError as e:
            print(f"Error: {e}")
            return
        note.set_color(value.upper())

    async def _cmd_move(self, args) -> None:
        note = self._require_selected()
        if note is None:
            return
        values = self._parse_numbers(args, 2, "move <left> <top>")
        if values is None:
            return
        note.set_geometry(values[0], values[1], note.width, note.height)

    async def _cmd_resize(self, args) -> None:
        note = self._require_selected()
        if note is None:
            return
        values = self._parse_numbers(args, 2, "resize <width> <height>")
        if values is None:
            return
        note.set_geometry(note.left, note.top, values[0], values[1])

    async def _cmd_duration(self, args) -> None:
        note = self._require_selected()
        if note is None:
            return
        values = self._parse_numbers(args, 1, "duration <minutes>")
        if values is None:
            return
        note.set_duration_minutes(values[0])
        print(f"Duration {note.duration_minutes:g} min, remaining {note.remaining_display}")

    async def _cmd_search(self, args) -> None:
        self.collection.set_search_text(" ".join(args))
        await self._cmd_list()

    async def _cmd_save(self, args=None) -> None:
        if not self.collection.save_all_command.can_execute():
            print("save is not available (no notes)")
            return
        if await self.collection.save_all():
            print("✓ Notes saved")
        else:
            print("✗ Failed to save notes (see log)")

    async def _cmd_quit(self, args=None) -> None:
        print("Saving and exiting...")
        self.running = False

    async def _run_note_command(self, name: str) -> None:
        note = self._require_selected()
        if note is None:
            return
        command = note.commands[name]
        if not command.execute():
            print(f"{name} is not available right now")
            return
        print(f"{name}: remaining {note.remaining_display}, focus {note.focus_state.value}")

    def _require_selected(self) -> Optional[NoteController]:
        note = self.collection.selected
        if note is None:
            print("No note selected (use 'select <n>' or 'new')")
        return note

    @staticmethod
    def _parse_numbers(args, count: int, usage: str) -> Optional[list[float]]:
        if len(args) < count:
            print(f"Usage: {usage}")
            return None
        try:
            return [float(value) for value in args[:count]]
        except ValueError:
            print(f"Usage: {usage}")
            return None


__all__ = ["InteractiveShell"]
