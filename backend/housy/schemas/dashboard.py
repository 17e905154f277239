from pydantic import BaseModel

from housy.schemas.expense import ExpenseGroupResponse, ExpenseItem
from housy.schemas.waste import NextCollectionResponse


class DashboardExpenses(BaseModel):
    total_month: float
    expense_count: int
    average_expense: float
    budget: float | None = None
    by_category: list[ExpenseGroupResponse]
    recent: list[ExpenseItem]


class DashboardNextChore(BaseModel):
    id: str
    name: str
    next_due: str | None = None


class DashboardChores(BaseModel):
    due_today: int
    overdue: int
    my_points: int
    next_chore: DashboardNextChore | None = None


class DashboardNextBill(BaseModel):
    id: str
    name: str
    due_day: int
    amount: float | None = None


class DashboardBills(BaseModel):
    upcoming_count: int
    overdue_count: int
    next_bill: DashboardNextBill | None = None


class DashboardResponse(BaseModel):
    period_start: str
    period_end: str
    expenses: DashboardExpenses
    chores: DashboardChores
    waste: NextCollectionResponse | None = None
    bills: DashboardBills
