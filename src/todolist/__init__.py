"""todolist: a small todo-list core with a rich/click front end."""

__version__ = "1.0.0"
