"""Contracts shared by the board workflow engine and its backends."""
