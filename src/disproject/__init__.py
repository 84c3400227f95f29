"""disproject: a project command dispatch menu for the terminal."""

__version__ = "0.3.0"
