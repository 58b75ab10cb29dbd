"""
Configuration module for Memvox.
Centralizes all settings with environment variable overrides.
"""
import os
from pathlib import Path
from typing import List


class Config:
    """Central configuration for Memvox"""

    # Categories a memory can be filed under (declared order matters for extraction)
    CATEGORIES: List[str] = [
        c.strip() for c in os.environ.get(
            "MEMVOX_CATEGORIES",
            "Personal,Work,Health,Shopping,Ideas,Important,General"
        ).split(",") if c.strip()
    ]
    DEFAULT_CATEGORY: str = os.environ.get("MEMVOX_DEFAULT_CATEGORY", "Personal")

    # Storage
    MEMORY_FILE_PATH: str = os.environ.get("MEMVOX_MEMORY_FILE_PATH", "memvox/data/memories.json")

    # Spoken summaries enumerate at most this many records verbatim
    SUMMARY_PREVIEW_COUNT: int = int(os.environ.get("MEMVOX_SUMMARY_PREVIEW_COUNT", "3"))

    # Analyzer
    TOP_KEYWORDS_LIMIT: int = int(os.environ.get("MEMVOX_TOP_KEYWORDS_LIMIT", "10"))

    # Delete-all confirmation window
    CONFIRMATION_TIMEOUT_SEC: float = float(os.environ.get("MEMVOX_CONFIRMATION_TIMEOUT_SEC", "45.0"))

    # Logging
    LOG_LEVEL: str = os.environ.get("MEMVOX_LOG_LEVEL", "INFO")

    # Quiet Mode - hides internal debug chatter for cleaner user experience
    QUIET_MODE: bool = os.environ.get("MEMVOX_QUIET_MODE", "false").lower() in ("true", "1", "yes")

    @classmethod
    def get_categories(cls) -> List[str]:
        """
        Get configured categories.
        The default category is always part of the known set.
        """
        categories = list(cls.CATEGORIES)
        if cls.DEFAULT_CATEGORY and not any(
            c.lower() == cls.DEFAULT_CATEGORY.lower() for c in categories
        ):
            categories.insert(0, cls.DEFAULT_CATEGORY)
        return categories

    @classmethod
    def get_memory_file_path(cls) -> Path:
        """Get the memory file path as a Path"""
        return Path(cls.MEMORY_FILE_PATH)
