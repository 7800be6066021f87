from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)

DEFAULT_TASK_FILE = Path("todos.json")


def get_task_file() -> Path:
    """Return the default task file in the current working directory."""
    return Path.cwd() / DEFAULT_TASK_FILE


def _resolve_path(path: Path | None) -> Path:
    """Return ``path`` with ``~`` expanded, defaulting to :func:`get_task_file`."""

    if path is None:
        return get_task_file()
    return Path(path).expanduser()


class TaskStoreError(RuntimeError):
    """Base class for failures reading or writing the task file."""


class ReadError(TaskStoreError):
    """The task file exists but could not be read."""


class ParseError(TaskStoreError):
    """The task file does not contain valid JSON."""


class SchemaError(TaskStoreError):
    """The task file is valid JSON but not a list of task objects."""


class SerializeError(TaskStoreError):
    """The task collection could not be encoded as JSON."""


class WriteError(TaskStoreError):
    """The encoded task collection could not be written to disk."""


@dataclass
class Task:
    """A single to-do entry."""

    id: int
    description: str
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "completed": self.completed,
        }


def _field_error(field: str, index: int) -> SchemaError:
    return SchemaError(f"Missing or invalid '{field}' (task at index {index})")


def _task_from_item(item: object, index: int) -> Task:
    """Validate one decoded JSON element and build a :class:`Task` from it."""

    if not isinstance(item, dict):
        raise _field_error("id", index)
    task_id = item.get("id")
    # bool is a subclass of int; JSON true/false is not an id
    if not isinstance(task_id, int) or isinstance(task_id, bool) or task_id < 0:
        raise _field_error("id", index)
    description = item.get("description")
    if not isinstance(description, str):
        raise _field_error("description", index)
    completed = item.get("completed")
    if not isinstance(completed, bool):
        raise _field_error("completed", index)
    return Task(id=task_id, description=description, completed=completed)


class TaskStore:
    """Load and save the whole task collection as one JSON array.

    Every call is a full read or a full rewrite of ``path``; nothing is cached
    between calls. A missing file is an empty collection.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = _resolve_path(path)

    def load(self) -> List[Task]:
        """Return every task in the file, in file order.

        Raises a :class:`TaskStoreError` subclass when the file cannot be read,
        is not JSON, or does not match the task schema. No partial list is
        ever returned.
        """
        if not self.path.exists():
            logger.debug("task file %s missing; starting empty", self.path)
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadError(f"Failed to read file: {exc}") from exc
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ParseError(f"Failed to parse JSON: {exc}") from exc
        if not isinstance(data, list):
            raise SchemaError("JSON must be an array")

        tasks: List[Task] = []
        seen: set[int] = set()
        for index, item in enumerate(data):
            task = _task_from_item(item, index)
            if task.id in seen:
                raise SchemaError(f"Duplicate task id {task.id} (task at index {index})")
            seen.add(task.id)
            tasks.append(task)
        logger.debug("loaded %d task(s) from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: Iterable[Task]) -> Path:
        """Overwrite the file with ``tasks`` and return the path written.

        The JSON is written to a temporary file beside the target and renamed
        into place.
        """
        try:
            text = json.dumps(
                [task.to_dict() for task in tasks], indent=2, ensure_ascii=False
            )
            # Lone surrogates (undecodable argv bytes) fail here, not mid-write.
            payload = (text + "\n").encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializeError(f"Failed to serialise JSON: {exc}") from exc

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise WriteError(f"Failed to write file: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("saved task file %s", self.path)
        return self.path


def load_tasks(path: Path | None = None) -> List[Task]:
    """Load tasks from ``path`` (default: :func:`get_task_file`)."""
    return TaskStore(path).load()


def save_tasks(tasks: Iterable[Task], path: Path | None = None) -> Path:
    """Persist ``tasks`` to ``path`` (default: :func:`get_task_file`)."""
    return TaskStore(path).save(tasks)


__all__ = [
    "DEFAULT_TASK_FILE",
    "ParseError",
    "ReadError",
    "SchemaError",
    "SerializeError",
    "Task",
    "TaskStore",
    "TaskStoreError",
    "WriteError",
    "get_task_file",
    "load_tasks",
    "save_tasks",
]
