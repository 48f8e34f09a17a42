"""Router aggregation for the API application."""

from fastapi import FastAPI

from . import budgets, dashboard, expenses, incomes, recurring_rules, subscriptions


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    app.include_router(expenses.router, prefix="/api")
    app.include_router(recurring_rules.router, prefix="/api")
    app.include_router(incomes.router, prefix="/api")
    app.include_router(budgets.router, prefix="/api")
    app.include_router(subscriptions.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")
