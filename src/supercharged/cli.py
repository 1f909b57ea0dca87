"""Interactive command loop for Supercharged Tasks.

The board is redrawn with a fresh clock reading on every cycle, so bonus
countdowns are always current without a background timer. The snapshot is
saved after every command and on exit/interrupt.
"""
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import click

from .board import Board
from .config import Settings
from .csv_io import export_csv, import_csv, read_csv_file, write_csv_file
from .errors import SuperchargedError, ValidationError
from .models import Task, TaskDraft, draft_from_task, now_local
from .storage import Storage

# --- terminal control helpers ---
# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
def _clear_screen() -> None:
    print("\033[3J\033[H\033[2J\033[H", end="", flush=True)


def _enter_alt_screen() -> None:
    print("\033[?1049h", end="", flush=True)


def _leave_alt_screen() -> None:
    print("\033[?1049l", end="", flush=True)


DATETIME_FORMATS = ['%Y-%m-%d %H:%M', '%Y-%m-%dT%H:%M', '%Y-%m-%d']


def prompt_draft(existing: Optional[TaskDraft] = None) -> TaskDraft:
    """Ask for every draft field; defaults come from ``existing`` or the usual 3/3/1h/now."""
    base = existing or TaskDraft(text='', scheduled_at=now_local())
    text = click.prompt("Task description", default=base.text or None, show_default=bool(base.text))
    importance = click.prompt("Importance (1 Very Low .. 5 Very High)", default=base.importance,
                              type=click.IntRange(1, 5))
    urgency = click.prompt("Urgency (1 Later .. 5 ASAP)", default=base.urgency, type=click.IntRange(1, 5))
    hours = click.prompt("Estimated time (hours)", default=base.estimated_time, type=float)
    default_at = (base.scheduled_at or now_local()).astimezone().strftime(DATETIME_FORMATS[0])
    scheduled: datetime = click.prompt("Scheduled at (YYYY-MM-DD HH:MM)", default=default_at,
                                       type=click.DateTime(DATETIME_FORMATS))
    return TaskDraft(text=text, importance=importance, urgency=urgency,
                     estimated_time=hours, scheduled_at=scheduled.astimezone())


class CLI:
    def __init__(self, board: Board, storage: Storage, settings: Settings):
        self.board: Board = board
        self.storage: Storage = storage
        self.alt_screen: bool = settings.alt_screen
        self.show_completed: bool = settings.show_completed
        self.messages: List[str] = []

    def run(self) -> None:
        """Main REPL loop; board is always cleared/redrawn each cycle."""
        exit_message: Optional[str] = None
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                _clear_screen()
                print("Supercharged Tasks:")
                self.board.display(now_local(), self.show_completed)
                for msg in self.messages:
                    print(msg)
                self.messages = []
                line = input("\n: ").strip()
                if not line:
                    continue
                lower = line.lower()
                if lower == 'help':
                    _clear_screen()
                    self._help()
                    input("\nPress Enter to return to the board...")
                    continue
                if lower == 'exit':
                    self.save()
                    exit_message = "Goodbye."
                    break
                self.handle_command(line)
                self.save()
        except (KeyboardInterrupt, EOFError, click.Abort):
            self.save()
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            for msg in self.messages:
                print(msg)
            if exit_message:
                print(exit_message)

    def save(self) -> None:
        try:
            self.storage.save_tasks(self.board.all_tasks())
        except SuperchargedError as exc:
            self.messages.append(f"Warning: {exc}")

    # -------------------- command dispatch --------------------
    def handle_command(self, line: str) -> None:
        tokens = line.split()
        if not tokens:
            return
        cmd = tokens[0].lower()
        handlers = {
            'add': self._cmd_add,
            'edit': self._cmd_edit,
            'done': self._cmd_done,
            'undo': self._cmd_done,
            'rm': self._cmd_rm,
            'clear': self._cmd_clear,
            'show': self._cmd_show,
            'hide': self._cmd_hide,
            'export': self._cmd_export,
            'import': self._cmd_import,
        }
        handler = handlers.get(cmd)
        if handler is None:
            self.messages.append("Unknown command. Type 'help' for instructions.")
            return
        try:
            handler(tokens)
        except SuperchargedError as exc:
            self.messages.append(str(exc))

    def _lookup(self, tokens: List[str], usage: str) -> Optional[Task]:
        if len(tokens) != 2:
            self.messages.append(f"Usage: {usage}")
            return None
        raw = tokens[1].rstrip('.')
        if not raw.isdigit():
            self.messages.append("Invalid number.")
            return None
        task = self.board.task_at(int(raw), self.show_completed)
        if task is None:
            self.messages.append(f"No task #{raw} on the board.")
        return task

    # ---- individual command helpers ----
    def _cmd_add(self, tokens: List[str]) -> None:
        if len(tokens) > 1:  # inline shorthand, defaults for the rest
            draft = TaskDraft(text=' '.join(tokens[1:]), scheduled_at=now_local())
        else:
            draft = prompt_draft()
        try:
            task = self.board.add_task(draft, now_local())
        except ValidationError as exc:
            self.messages.append(str(exc))
            return
        self.messages.append(f'Task "{task.text}" added.')

    def _cmd_edit(self, tokens: List[str]) -> None:
        task = self._lookup(tokens, "edit <n>")
        if task is None:
            return
        draft = prompt_draft(draft_from_task(task))
        try:
            self.messages.append(self.board.update_task(task.id, draft, now_local()))
        except ValidationError as exc:
            self.messages.append(str(exc))

    def _cmd_done(self, tokens: List[str]) -> None:
        task = self._lookup(tokens, f"{tokens[0]} <n>")
        if task is not None:
            self.messages.append(self.board.toggle_complete(task.id, now_local()))

    def _cmd_rm(self, tokens: List[str]) -> None:
        task = self._lookup(tokens, "rm <n>")
        if task is not None:
            self.messages.append(self.board.delete_task(task.id))

    def _cmd_clear(self, tokens: List[str]) -> None:
        self.messages.append(self.board.clear_completed())

    def _cmd_show(self, tokens: List[str]) -> None:
        self.show_completed = True

    def _cmd_hide(self, tokens: List[str]) -> None:
        self.show_completed = False

    def _cmd_export(self, tokens: List[str]) -> None:
        path = Path(tokens[1]) if len(tokens) > 1 else Path('supercharged_tasks_export.csv')
        write_csv_file(path, export_csv(self.board.all_tasks()))
        self.messages.append(f"Tasks exported successfully to {path}!")

    def _cmd_import(self, tokens: List[str]) -> None:
        if len(tokens) != 2:
            self.messages.append("Usage: import <file.csv>  (replaces all current tasks)")
            return
        result = import_csv(read_csv_file(Path(tokens[1])), now_local())
        self.board.replace_all(result.tasks)
        self.messages.extend(result.warnings)
        self.messages.append(f"{len(result.tasks)} tasks imported successfully!")

    # -------------------- help --------------------
    def _help(self) -> None:
        print("Commands:")
        print("  add                 Add a new task (prompts for every field)")
        print("  add <text...>       Shorthand add: importance 3, urgency 3, 1h, scheduled now")
        print("  edit <n>            Edit task number n")
        print("  done <n>            Complete task n (or move a completed task back to pending)")
        print("  undo <n>            Same as done; reads better for completed tasks")
        print("  rm <n>              Remove task n")
        print("  clear               Remove all completed tasks")
        print("  show / hide         Show or hide the completed list")
        print("  export [file.csv]   Export all tasks to CSV")
        print("  import <file.csv>   Import tasks from CSV (replaces all current tasks)")
        print("  help                Show this help (press Enter to return)")
        print("  exit                Save and exit")
        print()
        print("Score: value = importance x urgency; tasks are ranked by value per hour.")
        print("Finishing between the scheduled time and scheduled time + 2x estimate earns a 20% bonus.")
