"""todo_app package."""

from .task_manager import (
    TaskNotFoundError,
    add_task,
    clear_tasks,
    complete_task,
    format_task,
    list_tasks,
    main,
    remove_task,
)
from .task_store import (
    DEFAULT_TASK_FILE,
    ParseError,
    ReadError,
    SchemaError,
    SerializeError,
    Task,
    TaskStore,
    TaskStoreError,
    WriteError,
    get_task_file,
    load_tasks,
    save_tasks,
)

__all__ = [
    "DEFAULT_TASK_FILE",
    "ParseError",
    "ReadError",
    "SchemaError",
    "SerializeError",
    "Task",
    "TaskNotFoundError",
    "TaskStore",
    "TaskStoreError",
    "WriteError",
    "add_task",
    "clear_tasks",
    "complete_task",
    "format_task",
    "get_task_file",
    "list_tasks",
    "load_tasks",
    "main",
    "remove_task",
    "save_tasks",
]
