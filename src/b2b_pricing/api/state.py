"""
Shared service instances for the API.

Built lazily from the global settings so importing the app never touches
disk; configure() swaps in a different data directory.
"""
from typing import Optional

from ..config.settings import Settings, get_settings
from ..engine import PricingEngine
from ..services.tiers_service import TiersService
from ..services.quotes_service import QuotesService


class AppState:
    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings
        self._engine: Optional[PricingEngine] = None
        self._tiers: Optional[TiersService] = None
        self._quotes: Optional[QuotesService] = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def engine(self) -> PricingEngine:
        if self._engine is None:
            self._engine = PricingEngine(self.settings)
        return self._engine

    @property
    def tiers_service(self) -> TiersService:
        if self._tiers is None:
            self._tiers = TiersService(self.settings.tiers_csv, max_tiers=self.settings.max_tiers)
        return self._tiers

    @property
    def quotes_service(self) -> QuotesService:
        if self._quotes is None:
            self._quotes = QuotesService(self.settings.quotes_json, page_size=self.settings.quotes_page_size)
        return self._quotes

    def configure(self, settings: Settings):
        """Point every service at a new settings object."""
        self.__init__(settings)


state = AppState()
