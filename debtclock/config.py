from __future__ import annotations

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBTCLOCK_API_BASE_URL: str = "https://api.fiscaldata.treasury.gov/services/api/fiscal_service"

    # Rough denominators for the per-capita / per-taxpayer framing.
    DEBTCLOCK_US_POPULATION: int = 335_000_000
    DEBTCLOCK_US_TAXPAYERS: int = 168_000_000

    # Static placeholder KPIs. These are NOT fetched or derived; swap in BEA GDP
    # and MTS interest outlays if they ever need to be live.
    DEBTCLOCK_MOCK_DEBT_TO_GDP: float = 1.25
    DEBTCLOCK_MOCK_EST_INTEREST_ANNUAL: float = 0.79 * 1_000_000_000_000

    DEBTCLOCK_TREND_DAYS: int = 30
    # Seconds between ticker frames.
    DEBTCLOCK_TICK_INTERVAL: float = 0.1

    @property
    def api_base_url(self) -> str:
        return self.DEBTCLOCK_API_BASE_URL

    @property
    def population(self) -> int:
        return self.DEBTCLOCK_US_POPULATION

    @property
    def taxpayers(self) -> int:
        return self.DEBTCLOCK_US_TAXPAYERS

    @property
    def mock_debt_to_gdp(self) -> float:
        return self.DEBTCLOCK_MOCK_DEBT_TO_GDP

    @property
    def mock_est_interest_annual(self) -> float:
        return self.DEBTCLOCK_MOCK_EST_INTEREST_ANNUAL

    @property
    def trend_days(self) -> int:
        return self.DEBTCLOCK_TREND_DAYS

    @property
    def tick_interval(self) -> float:
        return self.DEBTCLOCK_TICK_INTERVAL


class DisplayOptions(BaseModel):
    compact: bool = True
    show_deltas: bool = True
    ticker_on: bool = True


def load_settings() -> Settings:
    return Settings()
