from housy.models.bill import BillCategory, BillSource, BillStatus, RecurringBill
from housy.models.chore import Chore, ChoreCompletion, ChoreFrequency
from housy.models.expense import Expense
from housy.models.expense_category import ExpenseCategory
from housy.models.household import Household
from housy.models.member import HouseholdMember, MemberRole
from housy.models.user import User
from housy.models.waste import WasteSchedule, WasteType

__all__ = [
    "BillCategory",
    "BillSource",
    "BillStatus",
    "Chore",
    "ChoreCompletion",
    "ChoreFrequency",
    "Expense",
    "ExpenseCategory",
    "Household",
    "HouseholdMember",
    "MemberRole",
    "RecurringBill",
    "User",
    "WasteSchedule",
    "WasteType",
]
