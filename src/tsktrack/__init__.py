"""tsktrack: tasks and notes created from one line of text, one YAML file per record."""

__version__ = "0.3.0"
