"""
Terminal front end.

Typer command groups, Rich rendering and an interactive shell over one
NotelyApp.
"""
