"""Pet adoption system: users, pets and adoption applications on flat files."""

__version__ = "0.1.0"
