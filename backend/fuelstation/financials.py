"""Financial statements behind the dashboard endpoints.

Every function here reads from the ledgers and returns plain dicts ready for
``jsonify``. Percentages are 0 whenever their base is 0.
"""
from collections import OrderedDict
from sqlalchemy import func
from fuelstation.extensions import db
from fuelstation.models import (
    Sale, Expense, BankAccount, BankTransaction, PettyCashBalance, Customer,
    FuelInventory, Employee, Loan, Payroll, TransactionTypeEnum,
)
from utils.periods import trend_key

APPROVED = "Approved"
RECENT_LIMIT = 5

OPERATING_INFLOW_CATEGORIES = {"Sales", "Income", "Revenue"}
OPERATING_OUTFLOW_CATEGORIES = {"Expense", "Utilities", "Maintenance", "Salary"}
INVESTING_CATEGORIES = {"Equipment Purchase", "Asset Sale"}
FINANCING_CATEGORIES = {"Loan", "Investment"}


def _pct(part, whole):
    return (part / whole) * 100 if whole else 0


def _iso(value):
    return value.isoformat() if value else None


def _in_window(query, column, start, end, include_end=True):
    query = query.filter(column >= start)
    return query.filter(column <= end if include_end else column < end)


def _sales_query(start, end, station_id=None, include_end=True):
    query = _in_window(Sale.query, Sale.date, start, end, include_end)
    if station_id is not None:
        query = query.filter(Sale.station_id == station_id)
    return query


def _expense_query(start, end, station_id=None, include_end=True):
    query = _in_window(Expense.query, Expense.date, start, end, include_end)
    query = query.filter(Expense.approval_status == APPROVED)
    if station_id is not None:
        query = query.filter(Expense.station_id == station_id)
    return query


def _sum(query, column):
    return float(query.with_entities(func.coalesce(func.sum(column), 0)).scalar() or 0)


# ------ building blocks ------

def sales_data(period, station_id=None):
    sales = _sales_query(period.start, period.end, station_id).order_by(Sale.date.desc()).all()

    total_sales = sum(sale.total_amount for sale in sales)
    total_quantity = sum(sale.quantity for sale in sales)

    by_fuel = {}
    for sale in sales:
        entry = by_fuel.setdefault(sale.fuel_type, {"quantity": 0, "amount": 0, "count": 0})
        entry["quantity"] += sale.quantity
        entry["amount"] += sale.total_amount
        entry["count"] += 1

    top_selling = sorted(
        (
            {
                "fuelType": fuel_type,
                "quantity": entry["quantity"],
                "amount": entry["amount"],
                "count": entry["count"],
                "percentage": _pct(entry["amount"], total_sales),
            }
            for fuel_type, entry in by_fuel.items()
        ),
        key=lambda item: item["amount"],
        reverse=True,
    )

    recent = [
        {
            "id": sale.id,
            "saleId": sale.sale_id,
            "date": _iso(sale.date),
            "fuelType": sale.fuel_type,
            "quantity": sale.quantity,
            "totalAmount": sale.total_amount,
            "paymentMethod": sale.payment_method,
        }
        for sale in sales[:RECENT_LIMIT]
    ]

    return {
        "summary": {
            "totalSales": total_sales,
            "totalQuantity": total_quantity,
            "salesCount": len(sales),
            "averageSaleAmount": total_sales / len(sales) if sales else 0,
        },
        "topSellingFuels": top_selling,
        "recentSales": recent,
    }


def expense_data(period, station_id=None):
    expenses = _expense_query(period.start, period.end, station_id).order_by(Expense.date.desc()).all()
    total_expenses = sum(expense.amount for expense in expenses)

    by_category = {}
    for expense in expenses:
        by_category[expense.category] = by_category.get(expense.category, 0) + expense.amount

    top_categories = sorted(
        (
            {"category": category, "amount": amount, "percentage": _pct(amount, total_expenses)}
            for category, amount in by_category.items()
        ),
        key=lambda item: item["amount"],
        reverse=True,
    )

    recent = [
        {
            "id": expense.id,
            "expenseId": expense.expense_id,
            "date": _iso(expense.date),
            "category": expense.category,
            "description": expense.description,
            "amount": expense.amount,
            "paymentMethod": expense.payment_method,
        }
        for expense in expenses[:RECENT_LIMIT]
    ]

    return {
        "summary": {
            "totalExpenses": total_expenses,
            "expenseCount": len(expenses),
            "averageExpenseAmount": total_expenses / len(expenses) if expenses else 0,
        },
        "topCategories": top_categories,
        "recentExpenses": recent,
    }


def _bank_accounts(station_id=None):
    query = BankAccount.query
    if station_id is not None:
        query = query.filter(BankAccount.station_id == station_id)
    return query.order_by(BankAccount.id).all()


def _petty_cash_balances(station_id=None):
    query = PettyCashBalance.query
    if station_id is not None:
        query = query.filter(PettyCashBalance.station_id == station_id)
    return query.order_by(PettyCashBalance.station_id).all()


def cash_position(station_id=None):
    accounts = _bank_accounts(station_id)
    petty_cash = _petty_cash_balances(station_id)

    total_bank = sum(account.current_balance for account in accounts)
    total_petty = sum(balance.current_balance for balance in petty_cash)

    return {
        "bankAccounts": [
            {
                "id": account.id,
                "accountName": account.account_name,
                "bankName": account.bank_name,
                "balance": account.current_balance,
            }
            for account in accounts
        ],
        "totalBankBalance": total_bank,
        "pettyCash": [
            {"stationId": balance.station_id, "balance": balance.current_balance}
            for balance in petty_cash
        ],
        "totalPettyCash": total_petty,
        "totalCashPosition": total_bank + total_petty,
    }


def financial_ratios(revenue, expenses):
    profit = revenue - expenses
    return {
        "profitability": {
            "grossProfitMargin": _pct(profit, revenue),
            "operatingExpenseRatio": _pct(expenses, revenue),
        }
    }


def _change(current, previous):
    # Without a positive baseline growth is reported as 100%.
    return ((current - previous) / previous) * 100 if previous > 0 else 100


def _period_figures(revenue, expenses):
    profit = revenue - expenses
    return {
        "revenue": revenue,
        "expenses": expenses,
        "profit": profit,
        "profitMargin": _pct(profit, revenue),
    }


def performance_metrics(period, station_id=None):
    """Compare the period with the window of equal length just before it."""
    revenue = _sum(_sales_query(period.start, period.end, station_id), Sale.total_amount)
    expenses = _sum(_expense_query(period.start, period.end, station_id), Expense.amount)

    previous = period.previous()
    previous_revenue = _sum(
        _sales_query(previous.start, previous.end, station_id, include_end=False), Sale.total_amount
    )
    previous_expenses = _sum(
        _expense_query(previous.start, previous.end, station_id, include_end=False), Expense.amount
    )

    current_figures = _period_figures(revenue, expenses)
    previous_figures = _period_figures(previous_revenue, previous_expenses)

    return {
        "currentPeriod": current_figures,
        "previousPeriod": previous_figures,
        "changes": {
            "revenueChange": _change(revenue, previous_revenue),
            "expenseChange": _change(expenses, previous_expenses),
            "profitChange": _change(current_figures["profit"], previous_figures["profit"]),
        },
    }


def staff_metrics(station_id=None):
    query = Employee.query
    if station_id is not None:
        query = query.filter(Employee.station_id == station_id)
    employees = query.all()

    total_basic = sum(employee.basic_salary for employee in employees)
    total_allowances = sum(employee.total_allowances for employee in employees)

    employee_ids = [employee.id for employee in employees]
    active_loans = []
    if employee_ids:
        active_loans = Loan.query.filter(
            Loan.employee_id.in_(employee_ids), Loan.status == "active"
        ).all()

    return {
        "employeeCount": len(employees),
        "payroll": {
            "totalBasicSalary": total_basic,
            "totalAllowances": total_allowances,
            "totalSalaryExpense": total_basic + total_allowances,
        },
        "loans": {
            "activeLoansCount": len(active_loans),
            "totalOutstandingAmount": sum(loan.remaining_amount for loan in active_loans),
        },
    }


# ------ statements ------

def financial_summary(period, station_id=None):
    sales = sales_data(period, station_id)
    expenses = expense_data(period, station_id)
    revenue = sales["summary"]["totalSales"]
    total_expenses = expenses["summary"]["totalExpenses"]

    return {
        "period": period.to_dict(),
        "salesSummary": sales["summary"],
        "topSellingFuels": sales["topSellingFuels"],
        "expenseSummary": expenses["summary"],
        "topExpenseCategories": expenses["topCategories"],
        "profitSummary": {
            "revenue": revenue,
            "expenses": total_expenses,
            "grossProfit": revenue - total_expenses,
            "profitMargin": _pct(revenue - total_expenses, revenue),
        },
        "cashPosition": cash_position(station_id),
        "financialRatios": financial_ratios(revenue, total_expenses),
        "performanceMetrics": performance_metrics(period, station_id),
        "staffMetrics": staff_metrics(station_id),
        "recentActivity": {
            "sales": sales["recentSales"],
            "expenses": expenses["recentExpenses"],
        },
    }


def profit_loss_statement(period, station_id=None):
    sales = _sales_query(period.start, period.end, station_id).order_by(Sale.date).all()
    expenses = _expense_query(period.start, period.end, station_id).order_by(Expense.date).all()

    total_revenue = sum(sale.total_amount for sale in sales)
    by_fuel = OrderedDict()
    for sale in sales:
        entry = by_fuel.setdefault(sale.fuel_type, {"quantity": 0, "amount": 0})
        entry["quantity"] += sale.quantity
        entry["amount"] += sale.total_amount

    total_expenses = sum(expense.amount for expense in expenses)
    by_category = OrderedDict()
    for expense in expenses:
        by_category[expense.category] = by_category.get(expense.category, 0) + expense.amount

    expenses_by_category = [
        {"category": category, "amount": amount, "percentage": _pct(amount, total_expenses)}
        for category, amount in by_category.items()
    ]

    payroll_query = _in_window(Payroll.query, Payroll.date, period.start, period.end)
    payroll_query = payroll_query.filter(Payroll.payment_status == "Paid")
    if station_id is not None:
        payroll_query = payroll_query.filter(Payroll.station_id == station_id)
    # Employer cost of a payroll run: gross earnings plus employer EPF and ETF.
    payroll_expenses = sum(
        payroll.total_earnings + payroll.epf_employer + payroll.etf for payroll in payroll_query.all()
    )

    if payroll_expenses > 0:
        expenses_by_category.append({
            "category": "Payroll",
            "amount": payroll_expenses,
            "percentage": _pct(payroll_expenses, total_expenses + payroll_expenses),
        })

    grand_total_expenses = total_expenses + payroll_expenses
    gross_profit = total_revenue
    net_profit = total_revenue - grand_total_expenses

    revenue_by_bucket = {}
    for sale in sales:
        key = trend_key(sale.date, period.name)
        revenue_by_bucket[key] = revenue_by_bucket.get(key, 0) + sale.total_amount

    expenses_by_bucket = {}
    for expense in expenses:
        key = trend_key(expense.date, period.name)
        expenses_by_bucket[key] = expenses_by_bucket.get(key, 0) + expense.amount

    trends = []
    for key in sorted(set(revenue_by_bucket) | set(expenses_by_bucket)):
        revenue = revenue_by_bucket.get(key, 0)
        spent = expenses_by_bucket.get(key, 0)
        trends.append({
            "period": key,
            "revenue": revenue,
            "expenses": spent,
            "profit": revenue - spent,
            "profitMargin": _pct(revenue - spent, revenue),
        })

    return {
        "period": period.to_dict(),
        "revenue": {
            "totalRevenue": total_revenue,
            "salesByFuelType": [
                {
                    "fuelType": fuel_type,
                    "quantity": entry["quantity"],
                    "amount": entry["amount"],
                    "percentage": _pct(entry["amount"], total_revenue),
                }
                for fuel_type, entry in by_fuel.items()
            ],
        },
        "expenses": {
            "totalExpenses": grand_total_expenses,
            "expensesByCategory": expenses_by_category,
        },
        "summary": {
            "grossProfit": gross_profit,
            "grossMargin": _pct(gross_profit, total_revenue),
            "netProfit": net_profit,
            "netProfitMargin": _pct(net_profit, total_revenue),
        },
        "trends": trends,
    }


def payroll_obligations(as_of):
    """EPF and ETF still owed on payroll runs generated but not yet paid."""
    pending = Payroll.query.filter(
        Payroll.payment_status == "Pending", Payroll.created_at <= as_of
    ).all()

    epf_payable = sum(payroll.epf_employee + payroll.epf_employer for payroll in pending)
    etf_payable = sum(payroll.etf for payroll in pending)

    return {
        "epfPayable": epf_payable,
        "etfPayable": etf_payable,
        "totalDue": epf_payable + etf_payable,
    }


def balance_sheet(as_of, station_id=None):
    accounts = _bank_accounts(station_id)
    petty_cash = _petty_cash_balances(station_id)
    total_bank = sum(account.current_balance for account in accounts)
    total_petty = sum(balance.current_balance for balance in petty_cash)

    accounts_receivable = _sum(Customer.query.filter(Customer.status == "active"), Customer.credit_balance)

    inventory_query = FuelInventory.query
    if station_id is not None:
        inventory_query = inventory_query.filter(FuelInventory.station_id == station_id)
    fuel_inventory_value = sum(tank.stock_value for tank in inventory_query.all())

    fixed_assets = {
        "land": 0,
        "buildings": 0,
        "equipment": 0,
        "vehicles": 0,
        "totalFixedAssets": 0,
    }
    accounts_payable = 0

    loans = Loan.query.filter(Loan.status == "active", Loan.start_date <= as_of).order_by(Loan.id).all()
    total_loans = sum(loan.remaining_amount for loan in loans)
    obligations = payroll_obligations(as_of)

    total_current_assets = total_bank + total_petty + accounts_receivable + fuel_inventory_value
    total_assets = total_current_assets + fixed_assets["totalFixedAssets"]
    total_current_liabilities = accounts_payable + obligations["totalDue"]
    total_long_term_liabilities = total_loans
    total_liabilities = total_current_liabilities + total_long_term_liabilities
    owners_equity = total_assets - total_liabilities

    return {
        "asOfDate": _iso(as_of),
        "stationId": station_id or "All Stations",
        "assets": {
            "currentAssets": {
                "cashAndBankAccounts": {
                    "bankAccounts": [
                        {
                            "accountId": account.id,
                            "accountName": account.account_name,
                            "bankName": account.bank_name,
                            "balance": account.current_balance,
                        }
                        for account in accounts
                    ],
                    "pettyCash": [
                        {"stationId": balance.station_id, "balance": balance.current_balance}
                        for balance in petty_cash
                    ],
                    "totalCashAndBank": total_bank + total_petty,
                },
                "accountsReceivable": accounts_receivable,
                "inventory": {
                    "fuelInventoryValue": fuel_inventory_value,
                    "totalInventory": fuel_inventory_value,
                },
                "totalCurrentAssets": total_current_assets,
            },
            "fixedAssets": fixed_assets,
            "totalAssets": total_assets,
        },
        "liabilities": {
            "currentLiabilities": {
                "accountsPayable": accounts_payable,
                "payrollObligations": {
                    "epfPayable": obligations["epfPayable"],
                    "etfPayable": obligations["etfPayable"],
                    "totalPayrollObligations": obligations["totalDue"],
                },
                "totalCurrentLiabilities": total_current_liabilities,
            },
            "longTermLiabilities": {
                "loans": [
                    {
                        "loanId": loan.loan_id,
                        "purpose": loan.purpose,
                        "outstandingBalance": loan.remaining_amount,
                    }
                    for loan in loans
                ],
                "totalLongTermLiabilities": total_long_term_liabilities,
            },
            "totalLiabilities": total_liabilities,
        },
        "equity": {
            "ownersEquity": owners_equity,
            "totalEquity": owners_equity,
        },
        "liabilitiesAndEquity": total_liabilities + owners_equity,
        "balanced": abs(total_assets - (total_liabilities + owners_equity)) < 0.01,
    }


def opening_cash_balance(start, station_id=None):
    """Bank balances as at ``start`` plus the petty cash currently on hand."""
    bank_balance = 0
    for account in _bank_accounts(station_id):
        before_start = BankTransaction.query.filter(
            BankTransaction.account_id == account.id, BankTransaction.date < start
        )
        deposits = _sum(
            before_start.filter(BankTransaction.type == TransactionTypeEnum.deposit.value),
            BankTransaction.amount,
        )
        withdrawals = _sum(
            before_start.filter(BankTransaction.type == TransactionTypeEnum.withdrawal.value),
            BankTransaction.amount,
        )
        bank_balance += account.opening_balance + deposits - withdrawals

    # Petty cash keeps no history, so the current balance stands in.
    petty_cash = sum(balance.current_balance for balance in _petty_cash_balances(station_id))
    return bank_balance + petty_cash


def classify_transaction(category, transaction_type):
    """Return ``(activity, direction, label)`` for a bank transaction."""
    is_deposit = transaction_type == TransactionTypeEnum.deposit.value

    if category in OPERATING_INFLOW_CATEGORIES:
        return "operating", "inflows", "Operating Revenue"
    if category in OPERATING_OUTFLOW_CATEGORIES:
        return "operating", "outflows", "Operating Expense"
    if category in INVESTING_CATEGORIES:
        if is_deposit:
            return "investing", "inflows", "Asset Sale"
        return "investing", "outflows", "Asset Purchase"
    if category in FINANCING_CATEGORIES:
        if is_deposit:
            return "financing", "inflows", "Financing Inflow"
        return "financing", "outflows", "Financing Outflow"
    if is_deposit:
        return "operating", "inflows", "Other Operating Inflow"
    return "operating", "outflows", "Other Operating Outflow"


def cash_flow_statement(period, station_id=None):
    initial_balance = opening_cash_balance(period.start, station_id)

    query = _in_window(BankTransaction.query, BankTransaction.date, period.start, period.end)
    if station_id is not None:
        query = query.filter(BankTransaction.station_id == station_id)

    activities = {
        name: {"inflows": [], "outflows": []}
        for name in ("operating", "investing", "financing")
    }
    for transaction in query.order_by(BankTransaction.date).all():
        activity, direction, label = classify_transaction(transaction.category, transaction.type)
        activities[activity][direction].append({
            "date": _iso(transaction.date),
            "description": transaction.description,
            "amount": transaction.amount,
            "type": label,
        })

    sections = {}
    nets = {}
    for name, flows in activities.items():
        total_in = sum(item["amount"] for item in flows["inflows"])
        total_out = sum(item["amount"] for item in flows["outflows"])
        nets[name] = total_in - total_out
        sections[name] = {
            "inflows": flows["inflows"],
            "totalInflows": total_in,
            "outflows": flows["outflows"],
            "totalOutflows": total_out,
            "netCashFlow": nets[name],
        }

    net_cash_flow = nets["operating"] + nets["investing"] + nets["financing"]

    return {
        "period": period.to_dict(),
        "initialCashBalance": initial_balance,
        "operatingActivities": sections["operating"],
        "investingActivities": sections["investing"],
        "financingActivities": sections["financing"],
        "summary": {
            "netOperatingCashFlow": nets["operating"],
            "netInvestingCashFlow": nets["investing"],
            "netFinancingCashFlow": nets["financing"],
            "netCashFlow": net_cash_flow,
            "endingCashBalance": initial_balance + net_cash_flow,
        },
    }


def fuel_cost_prices(fallback=None):
    """Average tank cost price per fuel type, topped up from ``fallback``."""
    prices = dict(fallback or {})
    rows = (
        db.session.query(FuelInventory.fuel_type, func.avg(FuelInventory.cost_price))
        .filter(FuelInventory.cost_price > 0)
        .group_by(FuelInventory.fuel_type)
        .all()
    )
    for fuel_type, cost_price in rows:
        prices[fuel_type] = float(cost_price)
    return prices


def price_changes(sales):
    """Walk date-ordered sales and record every change of unit price."""
    changes = []
    current_price = None
    for index, sale in enumerate(sales):
        if index == 0:
            changes.append({
                "date": _iso(sale.date),
                "oldPrice": None,
                "newPrice": sale.unit_price,
                "changeAmount": 0,
                "changePercentage": 0,
            })
        elif sale.unit_price != current_price:
            changes.append({
                "date": _iso(sale.date),
                "oldPrice": current_price,
                "newPrice": sale.unit_price,
                "changeAmount": sale.unit_price - current_price,
                "changePercentage": _pct(sale.unit_price - current_price, current_price),
            })
        current_price = sale.unit_price
    return changes


def fuel_price_analysis(period, fuel_type=None, cost_prices=None):
    query = _sales_query(period.start, period.end)
    if fuel_type:
        query = query.filter(Sale.fuel_type == fuel_type)
    sales = query.order_by(Sale.date, Sale.id).all()

    if not sales:
        return {
            "period": period.to_dict(),
            "message": "No sales data found for the specified period",
        }

    by_fuel = OrderedDict()
    for sale in sales:
        by_fuel.setdefault(sale.fuel_type, []).append(sale)

    costs = fuel_cost_prices(cost_prices)
    analysis = OrderedDict()
    for fuel, fuel_sales in by_fuel.items():
        cost_price = costs.get(fuel, 0)
        latest_price = fuel_sales[-1].unit_price
        profit_per_unit = latest_price - cost_price

        analysis[fuel] = {
            "currentPrice": latest_price,
            "costPrice": cost_price,
            "profitPerUnit": profit_per_unit,
            "profitMarginPercentage": _pct(profit_per_unit, latest_price),
            "totalQuantity": sum(sale.quantity for sale in fuel_sales),
            "totalSales": sum(sale.total_amount for sale in fuel_sales),
            "totalProfit": sum(sale.quantity * (sale.unit_price - cost_price) for sale in fuel_sales),
            "salesCount": len(fuel_sales),
            "priceChanges": price_changes(fuel_sales),
        }

    figures = list(analysis.values())
    return {
        "period": period.to_dict(),
        "fuelPriceAnalysis": analysis,
        "summary": {
            "totalSales": sum(item["totalSales"] for item in figures),
            "totalProfit": sum(item["totalProfit"] for item in figures),
            "totalQuantity": sum(item["totalQuantity"] for item in figures),
            "averageProfitMargin": sum(item["profitMarginPercentage"] for item in figures) / len(figures),
        },
    }
