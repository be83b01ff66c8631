"""Configuration for the quickmarks popup server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RankingConfig:
    """Configuration for the result composition pipeline."""
    result_limit: int = 100  # Max bookmark hits kept per search
    scoring_enabled: bool = True  # Rank hits by relevance score
    personalize: bool = True  # Annotate rows with click history
    recent_fallback: bool = False  # Show recent bookmarks when history is empty

    @classmethod
    def from_env(cls) -> "RankingConfig":
        """Create config from environment variables."""
        return cls(
            result_limit=int(os.environ.get("QUICKMARKS_RESULT_LIMIT", "100")),
            scoring_enabled=_env_flag("QUICKMARKS_SCORING", "true"),
            personalize=_env_flag("QUICKMARKS_PERSONALIZE", "true"),
            recent_fallback=_env_flag("QUICKMARKS_RECENT_FALLBACK", "false"),
        )


@dataclass
class Config:
    """Main configuration for the quickmarks popup server."""
    ranking: RankingConfig = field(default_factory=RankingConfig.from_env)
    history_limit: int = 100  # Max click history entries kept
    history_db_path: Optional[Path] = None  # None = use default
    bookmarks_path: Optional[Path] = None  # None = locate from chrome_profile
    chrome_profile: str = "Default"  # Chrome profile name
    bridge_port: int = 8765  # WebSocket port for Chrome extension bridge
    include_folders: bool = False  # Initial state of the folder search toggle
    popup_width: int = 400
    popup_height: int = 500

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        db_path_str = os.environ.get("QUICKMARKS_HISTORY_DB")
        bookmarks_str = os.environ.get("QUICKMARKS_BOOKMARKS_FILE")

        return cls(
            ranking=RankingConfig.from_env(),
            history_limit=int(os.environ.get("QUICKMARKS_HISTORY_LIMIT", "100")),
            history_db_path=Path(db_path_str) if db_path_str else None,
            bookmarks_path=Path(bookmarks_str) if bookmarks_str else None,
            chrome_profile=os.environ.get("QUICKMARKS_CHROME_PROFILE", "Default"),
            bridge_port=int(os.environ.get("QUICKMARKS_BRIDGE_PORT", "8765")),
            include_folders=_env_flag("QUICKMARKS_INCLUDE_FOLDERS", "false"),
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
