"""Shared infrastructure for The Fic Shelf: errors, logging, validation, paths."""
