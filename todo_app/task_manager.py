import argparse
import re
import sys
from pathlib import Path
from typing import Callable, List, Sequence

from .logging_setup import setup_logging
from .task_store import (
    ParseError,
    ReadError,
    SchemaError,
    Task,
    TaskStore,
    TaskStoreError,
)

COMMANDS = ("add", "list", "complete", "remove", "clear")
CONFIRM_PROMPT = "Are you sure? This cannot be undone. (yes/no): "

_LOAD_ERRORS = (ReadError, ParseError, SchemaError)
_TASK_ID_RE = re.compile(r"[0-9]+")


class TaskNotFoundError(ValueError):
    """Raised when no task in the collection has the requested id."""

    def __init__(self, task_id: int) -> None:
        super().__init__(f"task id {task_id} not found")
        self.task_id = task_id


def _find_task(tasks: List[Task], task_id: int) -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    raise TaskNotFoundError(task_id)


def add_task(description: str, path: Path | None = None) -> Task:
    """Append a task with ``description`` and return it.

    ``description`` is stripped of surrounding whitespace and must not be empty.
    The new id is one more than the largest existing id, or 1 for an empty
    collection.
    """
    description = description.strip()
    if not description:
        raise ValueError("description must not be empty")
    store = TaskStore(path)
    tasks = store.load()
    next_id = max((t.id for t in tasks), default=0) + 1
    task = Task(id=next_id, description=description)
    tasks.append(task)
    store.save(tasks)
    return task


def list_tasks(path: Path | None = None) -> List[Task]:
    """Return the list of tasks."""
    return TaskStore(path).load()


def complete_task(task_id: int, path: Path | None = None) -> bool:
    """Mark the task with ``task_id`` as completed.

    Returns ``False`` without writing when the task was already complete.
    """
    store = TaskStore(path)
    tasks = store.load()
    task = _find_task(tasks, task_id)
    if task.completed:
        return False
    task.completed = True
    store.save(tasks)
    return True


def remove_task(task_id: int, path: Path | None = None) -> Task:
    """Remove the task with ``task_id`` and return it."""
    store = TaskStore(path)
    tasks = store.load()
    task = _find_task(tasks, task_id)
    tasks.remove(task)
    store.save(tasks)
    return task


def clear_tasks(path: Path | None = None) -> None:
    """Replace the task file with an empty collection."""
    TaskStore(path).save([])


def format_task(task: Task) -> str:
    status = "[x]" if task.completed else "[ ]"
    return f"{task.id}. {status} {task.description}"


def _parse_task_id(value: str) -> int | None:
    """Return ``value`` as a task id, or ``None`` unless it is all ASCII digits."""

    if not _TASK_ID_RE.fullmatch(value):
        return None
    return int(value)


def _store_error_message(exc: TaskStoreError, action: str = "saving tasks") -> str:
    if isinstance(exc, _LOAD_ERRORS):
        return f"Error loading tasks: {exc}"
    return f"Error {action}: {exc}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="Track tasks in a JSON file in the current directory",
    )
    sub = parser.add_subparsers(dest="cmd", metavar="command")

    add_p = sub.add_parser("add", help="Add a new task")
    add_p.add_argument("words", nargs=argparse.REMAINDER, help="Task description")

    sub.add_parser("list", help="List all tasks")

    complete_p = sub.add_parser("complete", help="Mark a task as complete")
    complete_p.add_argument("id", nargs="?", help="Task ID")

    remove_p = sub.add_parser("remove", help="Remove a task")
    remove_p.add_argument("id", nargs="?", help="Task ID")

    sub.add_parser("clear", help="Clear all tasks")
    return parser


def _run_add(words: Sequence[str], path: Path | None) -> None:
    description = " ".join(words)
    if not description.strip():
        print("Error: 'add' requires a task description")
        return
    try:
        task = add_task(description, path=path)
    except TaskStoreError as exc:
        print(_store_error_message(exc))
        return
    print(f"Task added with ID: {task.id}")


def _run_list(path: Path | None) -> None:
    try:
        tasks = list_tasks(path=path)
    except TaskStoreError as exc:
        print(_store_error_message(exc))
        return
    if not tasks:
        print("No tasks yet!")
        return
    for task in tasks:
        print(format_task(task))


def _run_complete(task_id: int, path: Path | None) -> None:
    try:
        changed = complete_task(task_id, path=path)
    except TaskNotFoundError:
        print(f"Task {task_id} not found.")
    except TaskStoreError as exc:
        print(_store_error_message(exc))
    else:
        if changed:
            print(f"Task {task_id} marked as complete.")
        else:
            print(f"Task {task_id} is already complete!")


def _run_remove(task_id: int, path: Path | None) -> None:
    try:
        remove_task(task_id, path=path)
    except TaskNotFoundError:
        print(f"Task {task_id} not found.")
    except TaskStoreError as exc:
        print(_store_error_message(exc))
    else:
        print(f"Task {task_id} removed.")


def _run_clear(path: Path | None, input_func: Callable[[str], str]) -> None:
    try:
        response = input_func(CONFIRM_PROMPT)
    except EOFError:
        response = ""
    # Only the exact word is accepted; letter case is the sole leniency.
    if response.lower() != "yes":
        print("Clear cancelled.")
        return
    try:
        clear_tasks(path=path)
    except TaskStoreError as exc:
        print(_store_error_message(exc, "clearing tasks"))
        return
    print("All tasks cleared.")


def main(
    argv: Sequence[str] | None = None,
    *,
    path: Path | None = None,
    input_func: Callable[[str], str] | None = None,
) -> int:
    """Run one task command and return the process exit code.

    ``path`` selects the task file (default: ``todos.json`` in the working
    directory). ``input_func`` reads the confirmation for ``clear`` and
    defaults to :func:`input`.
    """
    if argv is None:
        argv = list(sys.argv[1:])
    else:
        argv = list(argv)
    if input_func is None:
        input_func = input

    parser = _build_parser()

    if not argv:
        parser.print_help()
        return 0

    # Arguments are read positionally; trailing ones a command does not take
    # are ignored.
    command, rest = argv[0], argv[1:]
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        parser.print_help()
        return 0

    if command == "add":
        _run_add(rest, path)
    elif command == "list":
        _run_list(path)
    elif command in {"complete", "remove"}:
        if not rest:
            print(f"Error: '{command}' requires a task ID")
            return 0
        task_id = _parse_task_id(rest[0])
        if task_id is None:
            print("Error: Task ID must be a number")
            return 0
        if command == "complete":
            _run_complete(task_id, path)
        else:
            _run_remove(task_id, path)
    else:
        _run_clear(path, input_func)
    return 0


def run() -> None:
    """Console script entry point."""
    setup_logging()
    raise SystemExit(main())
