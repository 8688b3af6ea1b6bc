"""The dashboard route table.

A fixed set of GET bindings, each pairing a path with the gate that guards it
and the handler that serves it. Handlers are handed in as a
``DashboardHandlers`` bundle so any of them can be swapped out, and every call
to ``build_dashboard_blueprint`` produces a fresh blueprint.
"""
from collections import namedtuple
from flask import Blueprint
from utils.decorators import auth_required

FINANCE_ROLES = ("admin", "manager", "accountant")
PRICING_ROLES = ("admin", "manager")

RouteBinding = namedtuple("RouteBinding", ["path", "method", "handler", "roles", "description"])

DashboardHandlers = namedtuple(
    "DashboardHandlers",
    ["financial_summary", "profit_loss", "balance_sheet", "cash_flow", "fuel_price_analysis"],
)

DASHBOARD_ROUTES = (
    RouteBinding("/financial-summary", "GET", "financial_summary", FINANCE_ROLES,
                 "Financial dashboard summary"),
    RouteBinding("/profit-loss", "GET", "profit_loss", FINANCE_ROLES,
                 "Profit and loss statement"),
    RouteBinding("/balance-sheet", "GET", "balance_sheet", FINANCE_ROLES,
                 "Balance sheet"),
    RouteBinding("/cash-flow", "GET", "cash_flow", FINANCE_ROLES,
                 "Cash flow statement"),
    RouteBinding("/fuel-price-analysis", "GET", "fuel_price_analysis", PRICING_ROLES,
                 "Fuel price and profit margin analysis"),
)


def default_handlers():
    from fuelstation.routes import dashboard

    return DashboardHandlers(
        financial_summary=dashboard.get_financial_summary,
        profit_loss=dashboard.get_profit_loss_statement,
        balance_sheet=dashboard.get_balance_sheet,
        cash_flow=dashboard.get_cash_flow_statement,
        fuel_price_analysis=dashboard.get_fuel_price_analysis,
    )


def build_dashboard_blueprint(handlers=None, gate=auth_required, name="dashboard"):
    """Mountable blueprint answering the dashboard GET routes.

    ``gate`` is a decorator factory called with the binding's roles; whatever
    it returns instead of calling the view is sent back as is.
    """
    if handlers is None:
        handlers = default_handlers()
    blueprint = Blueprint(name, __name__)

    for binding in DASHBOARD_ROUTES:
        handler = getattr(handlers, binding.handler)
        blueprint.add_url_rule(
            binding.path,
            endpoint=binding.handler,
            view_func=gate(*binding.roles)(handler),
            methods=[binding.method],
        )
    return blueprint
