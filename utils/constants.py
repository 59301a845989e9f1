APP_NAME = "Finance Tracker"
DB_FILE = "finance.db"
DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
BUDGET_ALERT_THRESHOLD = 0.80  # default 80%
UPCOMING_DAYS = 30
RECURRING_DESCRIPTION_SUFFIX = " (Recurring)"

FREQUENCIES = ["daily", "weekly", "bi-weekly", "monthly", "quarterly", "yearly"]
DEFAULT_FREQUENCY = "monthly"

# Fixed-length frequencies, in days
DAY_INTERVALS = {
    "daily": 1,
    "weekly": 7,
    "bi-weekly": 14,
}

# Calendar frequencies, in months
MONTH_INTERVALS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

SUGGESTION_OVER_BUDGET = "Consider reducing spending on non-essential items."
SUGGESTION_UNDER_BUDGET = "Great job on managing expenses!"
SUGGESTION_GOAL_REACHED = (
    "Congratulations! You have reached your savings goal. "
    "Consider allocating surplus funds wisely."
)
SUGGESTION_GOAL_PENDING = (
    "You are {remaining} away from your savings goal. "
    "Keep track of your spending to reach your goal!"
)

CHART_COLORS = [
    "#FF9800", "#F44336", "#9C27B0", "#2196F3",
    "#00BCD4", "#FF5722", "#4CAF50", "#8BC34A",
    "#009688", "#888888",
]
