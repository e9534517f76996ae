# config.py
from dataclasses import dataclass

@dataclass
class Config:
    """Holds all application configuration."""
    LETTERBOXD_URL: str = "https://letterboxd.com"
    SEARCH_ENDPOINT: str = "https://tmdb-kunkun.jackyklai.workers.dev/"
    POSTER_BASE_URL: str = "https://image.tmdb.org/t/p/w500"
    USERNAME_KEY: str = "letterboxdUser"
    DATABASE_FILENAME: str = "letterboxd_search.db"
    DISPLAY_BUDGET: int = 100
    REQUEST_TIMEOUT: float = 10.0
    USER_AGENT: str = "letterboxd-search/0.1"

    @property
    def TMDB_REDIRECT_URL(self) -> str:
        return f"{self.LETTERBOXD_URL}/tmdb"
