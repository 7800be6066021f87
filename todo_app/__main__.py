from .task_manager import run

run()
