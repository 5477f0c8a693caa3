"""
The Fic Shelf
-------------
Track, organize and share fan-fiction reading activity.

Subpackages:
    core: exceptions, logging, validation and path configuration
    database: ORM models, entity managers, export and the CLI
    analytics: reading-interval parsing and monthly aggregation
"""

__version__ = "1.0.0"
