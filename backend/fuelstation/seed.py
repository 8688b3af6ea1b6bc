import os
from datetime import datetime, timedelta
from fuelstation.extensions import db
from fuelstation.models import (
    Role, User, Station, Sale, Expense, BankAccount, BankTransaction, PettyCashBalance,
    Customer, FuelInventory, Employee, EmployeeAllowance, Loan, Payroll, RoleEnum,
)

DEMO_USERS = [
    ("admin", RoleEnum.admin),
    ("manager", RoleEnum.manager),
    ("accountant", RoleEnum.accountant),
    ("cashier", RoleEnum.employee),
]

def get_role_id(role_name):
    role = Role.query.filter_by(name=role_name).first()
    return role.id if role else None

def seed_roles():
    for role_enum in RoleEnum:
        if not Role.query.filter_by(name=role_enum.value).first():
            db.session.add(Role(name=role_enum.value))
    db.session.commit()

def seed_data(now=None):
    """Load a demo station with a month of ledger activity. Safe to re-run."""
    now = now or datetime.utcnow()
    seed_roles()

    station = Station.query.filter_by(code="ST-001").first()
    if station:
        return station

    station = Station(code="ST-001", name="Colombo Central", city="Colombo")
    db.session.add(station)
    db.session.commit()

    password = os.getenv("ADMIN_PASSWORD", "change-me")
    for username, role_enum in DEMO_USERS:
        if not User.query.filter_by(username=username).first():
            user = User(username=username, role_id=get_role_id(role_enum.value), station_id=station.id)
            user.set_password(password)
            db.session.add(user)
    db.session.commit()

    tanks = [
        FuelInventory(station_id=station.id, fuel_type="Petrol 92", tank_id="T1",
                      tank_capacity=20000, current_volume=12000, cost_price=300, selling_price=340),
        FuelInventory(station_id=station.id, fuel_type="Auto Diesel", tank_id="T2",
                      tank_capacity=20000, current_volume=9000, cost_price=250, selling_price=290),
    ]
    db.session.add_all(tanks)

    account = BankAccount(account_name="Operations", account_number="001-22334455",
                          bank_name="Commercial Bank", station_id=station.id,
                          opening_balance=500000, current_balance=640000)
    db.session.add(account)
    db.session.add(PettyCashBalance(station_id=station.id, current_balance=8000))
    db.session.add(Customer(customer_id="CUS-001", name="City Transport", type="Corporate",
                            credit_limit=200000, credit_balance=45000))
    db.session.commit()

    for day in range(1, 29):
        moment = now - timedelta(days=day)
        db.session.add(Sale(sale_id=f"S-{day:03d}-1", date=moment, station_id=station.id,
                            fuel_type="Petrol 92", quantity=400, unit_price=340,
                            total_amount=400 * 340, payment_method="Cash"))
        db.session.add(Sale(sale_id=f"S-{day:03d}-2", date=moment, station_id=station.id,
                            fuel_type="Auto Diesel", quantity=300, unit_price=290,
                            total_amount=300 * 290, payment_method="BankCard"))
        db.session.add(BankTransaction(transaction_id=f"BT-{day:03d}", account_id=account.id,
                                       station_id=station.id, amount=50000, type="deposit",
                                       date=moment, description="Daily sales deposit", category="Sales"))

    db.session.add_all([
        Expense(expense_id="E-001", date=now - timedelta(days=10), station_id=station.id,
                category="Electricity", description="Monthly bill", amount=45000,
                approval_status="Approved"),
        Expense(expense_id="E-002", date=now - timedelta(days=5), station_id=station.id,
                category="Maintenance", description="Pump service", amount=18000,
                approval_status="Approved"),
    ])

    employee = Employee(employee_id="EMP-001", name="Nimal Perera", position="Pump Attendant",
                        station_id=station.id, basic_salary=60000)
    db.session.add(employee)
    db.session.commit()

    db.session.add(EmployeeAllowance(employee_id=employee.id, type="Transport", amount=5000))
    db.session.add(Loan(loan_id="L-001", employee_id=employee.id, amount=100000, purpose="Housing",
                        start_date=now - timedelta(days=60), remaining_amount=80000, status="active"))
    db.session.add(Payroll(employee_id=employee.id, station_id=station.id, date=now - timedelta(days=2),
                           total_earnings=65000, epf_employee=5200, epf_employer=7800, etf=1950,
                           payment_status="Paid"))
    db.session.commit()
    return station
