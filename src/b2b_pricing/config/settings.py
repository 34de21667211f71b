"""
Centralized settings and path configuration for the pricing tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


DATA_DIR_ENV = 'B2B_PRICING_DATA_DIR'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Catalog files
    products_csv: Path
    tiers_csv: Path

    # Quote store
    quotes_json: Path

    # Limits
    max_tiers: int = 5
    quotes_page_size: int = 20

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        if data_dir is None:
            env_dir = os.environ.get(DATA_DIR_ENV)
            data_dir = Path(env_dir) if env_dir else root / 'data'

        return cls(
            project_root=root,
            data_dir=data_dir,
            products_csv=data_dir / 'products.csv',
            tiers_csv=data_dir / 'price_tiers.csv',
            quotes_json=data_dir / 'quotes.json',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
