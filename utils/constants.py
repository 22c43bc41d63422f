DB_FILE = "cashflow.db"
DEFAULT_CATEGORIES = [
    {"name": "Sales",          "type": "income",  "color_hex": "#4CAF50"},
    {"name": "Retainers",      "type": "income",  "color_hex": "#8BC34A"},
    {"name": "Rent",           "type": "expense", "color_hex": "#F44336"},
    {"name": "Subscriptions",  "type": "expense", "color_hex": "#9C27B0"},
    {"name": "Salaries",       "type": "expense", "color_hex": "#FF9800"},
    {"name": "Utilities",      "type": "expense", "color_hex": "#2196F3"},
    {"name": "Other",          "type": "both",    "color_hex": "#888888"},
]

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

ITEM_TYPES = ("expense", "income", "retainer")
CONTEXTS = ("business", "personal")
ALL_CONTEXTS = "all"

FREQUENCIES = ("weekly", "biweekly", "monthly", "quarterly", "yearly")
MONTHLY_FACTORS = {
    "weekly":    4.33,
    "biweekly":  2.17,
    "monthly":   1.0,
    "quarterly": 1 / 3,
    "yearly":    1 / 12,
}
DAY_INTERVALS = {
    "weekly":   7,
    "biweekly": 14,
}
MONTH_INTERVALS = {
    "monthly":   1,
    "quarterly": 3,
    "yearly":    12,
}

PERIOD_TYPES = ("monthly", "quarterly", "yearly")
PERIOD_MONTHS = {
    "monthly":   1,
    "quarterly": 3,
    "yearly":    12,
}
BUDGET_ALERT_THRESHOLD = 80.0  # percent
BUDGET_OVER_THRESHOLD = 100.0

SCENARIOS = ("optimistic", "realistic", "pessimistic")
SCENARIO_MULTIPLIERS = {
    "optimistic":  {"income": 1.15, "expenses": 0.90},
    "realistic":   {"income": 1.00, "expenses": 1.00},
    "pessimistic": {"income": 0.85, "expenses": 1.10},
}
DEFAULT_SCENARIO = "realistic"
DEFAULT_FORECAST_MONTHS = 6
HISTORY_LOOKBACK_MONTHS = 6
SUBSTANTIAL_RECURRING_COUNT = 3
GAP_FILL_DAMPING = 0.5
