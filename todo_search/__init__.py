"""todo-search: boolean, field-aware filtering of task records."""

__version__ = "0.3.0"
