import os
from functools import lru_cache
from pathlib import Path

DEFAULT_CATEGORIES = (
    "Food",
    "Transport",
    "Entertainment",
    "Shopping",
    "Bills",
    "Healthcare",
    "Other",
)


class Settings:
    def __init__(
        self,
        database_url: str,
        timezone: str,
        categories: tuple[str, ...],
        warning_pct: int,
        currency: str,
        log_level: str,
        auto_create_schema: bool = True,
    ) -> None:
        self.database_url = database_url
        self.timezone = timezone
        self.categories = categories
        self.warning_pct = warning_pct
        self.currency = currency
        self.log_level = log_level
        self.auto_create_schema = auto_create_schema


def _ensure_data_dir() -> Path:
    root = Path(os.getenv("BUDGETS_DATA_DIR", "./data")).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _parse_categories(raw: str) -> tuple[str, ...]:
    labels = tuple(part.strip() for part in raw.split(",") if part.strip())
    return labels or DEFAULT_CATEGORIES


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _ensure_data_dir()
    default_db = data_dir / "budgets.db"
    database_url = os.getenv("BUDGETS_DATABASE_URL", f"sqlite:///{default_db}")
    timezone = os.getenv("BUDGETS_TIMEZONE", "Africa/Nairobi")
    categories = _parse_categories(os.getenv("BUDGETS_CATEGORIES", ""))
    warning_pct = int(os.getenv("BUDGETS_WARNING_PCT", "80"))
    if not 0 < warning_pct <= 100:
        raise ValueError("BUDGETS_WARNING_PCT must be between 1 and 100")
    currency = os.getenv("BUDGETS_CURRENCY", "KES")
    log_level = os.getenv("BUDGETS_LOG_LEVEL", "INFO").upper()
    auto_create_schema = os.getenv("BUDGETS_AUTO_CREATE_SCHEMA", "1") == "1"
    return Settings(
        database_url=database_url,
        timezone=timezone,
        categories=categories,
        warning_pct=warning_pct,
        currency=currency,
        log_level=log_level,
        auto_create_schema=auto_create_schema,
    )
