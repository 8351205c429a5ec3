"""prfiles - see which files the open pull requests of a repository touch."""

__version__ = "0.1.0"
