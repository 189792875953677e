from .habit import Habit
from .check_in import CheckIn
from .weight_entry import WeightEntry

__all__ = [
    "Habit",
    "CheckIn",
    "WeightEntry",
]
