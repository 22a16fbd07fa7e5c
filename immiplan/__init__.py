"""Immigration cost planner: cost items, partial payments and currency-aware totals."""

__version__ = "0.1.0"
