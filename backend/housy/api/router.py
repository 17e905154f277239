from fastapi import APIRouter

from housy.api.auth import router as auth_router
from housy.api.bills import router as bills_router
from housy.api.categories import router as categories_router
from housy.api.chores import router as chores_router
from housy.api.dashboard import router as dashboard_router
from housy.api.expenses import router as expenses_router
from housy.api.households import router as households_router
from housy.api.waste import router as waste_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(bills_router)
api_router.include_router(categories_router)
api_router.include_router(chores_router)
api_router.include_router(dashboard_router)
api_router.include_router(expenses_router)
api_router.include_router(households_router)
api_router.include_router(waste_router)
