#!/usr/bin/env python3
"""
managers package
--------------------
Entity managers for The Fic Shelf database.

Each manager handles the operations for one area of the model and
inherits from BaseManager.

Available Managers:
    BaseManager: Abstract base class with common utilities
    TaggableManager: Config-driven get-or-create for Fandom, Relationship,
        Character and Tag
    LinkManager: Link insertion and set-difference reconciliation
    FicManager: Fic creation, editing and lookups
    ShelfManager: Shelves and fic placement
    ReadingLogManager: Reading logs and ranges
    ProfileManager: Users
    SocialManager: Follows, posts, likes, comments, bookmarks, notifications
    DiscoverManager: Searches over fics, public shelves and profiles

Usage:
    from ficshelf.database.managers import FicManager, TaggableManager

    fic_mgr = FicManager(session, logger)
    fandoms = TaggableManager.for_fandoms(session, logger)
"""
from .base_manager import BaseManager
from .taggable_manager import CATEGORY_CONFIGS, TaggableConfig, TaggableManager
from .link_manager import LINK_CONFIGS, LinkDiff, LinkManager
from .fic_manager import FicManager
from .shelf_manager import ShelfManager
from .reading_log_manager import ReadingLogManager
from .profile_manager import ProfileManager
from .social_manager import Notification, SocialManager
from .discover_manager import PAGE_SIZE, DiscoverManager, SearchPage

__all__ = [
    "BaseManager",
    "CATEGORY_CONFIGS",
    "TaggableConfig",
    "TaggableManager",
    "LINK_CONFIGS",
    "LinkDiff",
    "LinkManager",
    "FicManager",
    "ShelfManager",
    "ReadingLogManager",
    "ProfileManager",
    "SocialManager",
    "Notification",
    "DiscoverManager",
    "SearchPage",
    "PAGE_SIZE",
]
