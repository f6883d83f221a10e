# grocery_compare/config/settings.py

"""Central configuration for the grocery_compare engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the grocery_compare engine."""

    # --- Data source ---
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    REQUEST_DELAY: float = 1.0          # Base backoff between retries
    MAX_RETRIES: int = 3                # Retry count on transient failures
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    PRODUCTS_TABLE: str = "products"
    PROMOTION_TABLES: list[dict[str, str]] = [
        {"table": "winners_promotions", "store": "Winners"},
        {"table": "super_u_promotions", "store": "Super U"},
        {"table": "kingsavers_promotions", "store": "Kingsavers"},
    ]

    # --- Cache ---
    PRODUCTS_CACHE_TTL: float = 300.0   # 5 minutes
    PROMOTIONS_CACHE_TTL: float = 300.0

    # --- Stores ---
    # Ordered substring rules: first rule with a matching needle wins.
    STORE_ALIAS_RULES: list[tuple[tuple[str, ...], str]] = [
        (("winner",), "winners"),
        (("king", "saver"), "kingsavers"),
        (("super", "u"), "super u"),
    ]
    KNOWN_STORES: list[str] = ["Winners", "Kingsavers", "Super U"]
    STORE_ALIASES: dict[str, list[str]] = {
        "Winners": [
            "winners", "winners supermarket", "winners super", "winner",
            "winners pereybere", "winners grand baie", "winners triolet",
            "winners goodlands",
        ],
        "Kingsavers": [
            "kingsavers", "king savers", "king saver", "kingsaver",
            "king savers supermarket", "kingsavers supermarket",
        ],
        "Super U": [
            "super u", "superu", "hyper u", "hyperu", "super u market",
            "super u hypermarket",
        ],
    }

    # --- Categories & classification ---
    CATEGORIES: list[str] = [
        "dairy",
        "liquid",
        "wheat",
        "meat",
        "frozen",
        "snacks",
        "grown",
        "miscellaneous",
    ]
    FALLBACK_CATEGORY: str = "miscellaneous"
    MIN_CLASSIFICATION_CONFIDENCE: float = 0.5
    CATEGORIZE_FUNCTION: str = "categorize-products"
    STRUCTURE_FUNCTION: str = "structure-text"

    # --- Prices & grouping ---
    CURRENCY_LABEL: str = "Rs"
    MAX_PRICE: float = 1000.0           # Above this a price needs confirming
    PRICE_SPREAD_WARNING: float = 100.0  # Spread hinting at an over-merge
    GROUP_BY_SIZE: bool = False
    NAME_MATCHER: str = os.getenv("NAME_MATCHER", "substring")
    NAME_SIMILARITY_THRESHOLD: float = 0.5  # Score at which names match
    WORD_SIMILARITY_THRESHOLD: float = 0.75  # Edit similarity for one word

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
    DATA_PATH: Path = BASE_DIR / "data" / "snapshot.json"
