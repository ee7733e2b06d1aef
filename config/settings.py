"""Application settings and configuration."""
import os
from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


def _path(name: str, default: Path) -> Path:
    raw = os.getenv(name, '').strip()
    return Path(raw).expanduser() if raw else default


class Settings:
    """
    ─── RATE LIMITS ──────────────────────────────────────────────────────
    Personal keys allow 20 req/s and 100 req/min on the account and match
    endpoints. The by-puuid id listing endpoint has its own, much larger
    budget (2000 req / 10 s), so it is throttled through a separate bucket.

    The per-call limiter is not enough on its own: a full page of 100 ids
    is 100 detail calls, which exhausts the minute window in a few
    seconds. Batches of 15 plus a pacing pause keep a long sync flowing
    instead of stalling for a full minute at a time.
    ──────────────────────────────────────────────────────────────────────
    """

    # ── Remote ─────────────────────────────────────────────────────────────
    # The proxy injects X-Riot-Token; this process never sees the key.
    ARENA_PROXY_URL: str = os.getenv('ARENA_PROXY_URL', 'http://localhost:3000/api/riot')

    # ── HTTP ───────────────────────────────────────────────────────────────
    REQUEST_TIMEOUT:  int   = int(os.getenv('REQUEST_TIMEOUT', '30'))
    MAX_RETRIES:      int   = 3
    RETRY_BASE_DELAY: float = float(os.getenv('RETRY_BASE_DELAY', '2.0'))

    # ── Rate limits ────────────────────────────────────────────────────────
    RATE_LIMIT_PER_1_SEC:            int = 20
    RATE_LIMIT_PER_1_MIN:            int = 100
    MATCH_IDS_RATE_LIMIT_PER_10_SEC: int = 2000
    MATCH_IDS_BUCKET:                str = 'match_ids'

    # ── Sync ───────────────────────────────────────────────────────────────
    BATCH_SIZE:            int   = 15
    BATCH_PACING_DELAY:    float = float(os.getenv('BATCH_PACING_DELAY', '1.5'))
    LIST_PACING_DELAY:     float = float(os.getenv('LIST_PACING_DELAY', '1.2'))
    DEFAULT_PAGE_SIZE:     int   = int(os.getenv('DEFAULT_PAGE_SIZE', '100'))
    MAX_PAGE_SIZE:         int   = 200
    AUTO_REFRESH_COUNT:    int   = 30
    AUTO_REFRESH_INTERVAL: int   = int(os.getenv('AUTO_REFRESH_INTERVAL', '300'))

    # ── Progress scope ─────────────────────────────────────────────────────
    DEFAULT_HISTORY_LIMIT: int = 100
    MAX_HISTORY_LIMIT:     int = 500

    # ── Paths ──────────────────────────────────────────────────────────────
    BASE_DIR:   Path = Path(__file__).resolve().parent.parent
    DATA_DIR:   Path = _path('DATA_DIR', BASE_DIR / 'data')
    DB_DIR:     Path = DATA_DIR / 'db'
    BACKUP_DIR: Path = DATA_DIR / 'backups'
    LOG_DIR:    Path = DATA_DIR / 'logs'

    SETTINGS_DB_NAME:    str = 'settings.sqlite'
    MATCH_CACHE_DB_NAME: str = 'match_cache.sqlite'

    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> None:
        if not cls.ARENA_PROXY_URL:
            raise ValueError("ARENA_PROXY_URL must be set in config/.env")
        if cls.BATCH_SIZE <= 0 or cls.DEFAULT_PAGE_SIZE <= 0:
            raise ValueError("BATCH_SIZE and DEFAULT_PAGE_SIZE must be positive")

    @classmethod
    def create_directories(cls) -> None:
        cls.DB_DIR.mkdir(parents=True, exist_ok=True)
        cls.BACKUP_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def clamp_page_size(cls, value: int) -> int:
        try:
            n = int(value)
        except (TypeError, ValueError):
            n = cls.DEFAULT_PAGE_SIZE
        return max(1, min(cls.MAX_PAGE_SIZE, n))


settings = Settings()
