APP_NAME = "Sari-Sari Store"

DATA_DIR = "data"
DB_FILE_NAME = "sari_store.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

CURRENCY_SYMBOL = "₱"

PAYMENT_METHODS: tuple[str, ...] = ("cash", "bank_transfer", "other")
DEFAULT_PAYMENT_METHOD = "cash"

# customer tags
FREQUENT_BORROWER_THRESHOLD = 5      # credits within the lookback window
FREQUENT_BORROWER_LOOKBACK_DAYS = 30

# (label, lo, hi) by age of the credit date in days; hi=None is open-ended
AGING_BUCKETS: tuple[tuple[str, int, int | None], ...] = (
    ("0-7 days", 0, 7),
    ("8-15 days", 8, 15),
    ("16-30 days", 16, 30),
    ("Over 30 days", 31, None),
)
