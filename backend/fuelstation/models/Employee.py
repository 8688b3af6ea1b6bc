from datetime import datetime
from fuelstation.extensions import db

class Employee(db.Model):
    __tablename__ = 'employees'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(40), nullable=False, unique=True)
    name = db.Column(db.String(120), nullable=False)
    position = db.Column(db.String(80), nullable=False)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=True)
    basic_salary = db.Column(db.Float, nullable=False, default=0)
    join_date = db.Column(db.Date, nullable=True)

    allowances = db.relationship('EmployeeAllowance', backref='employee', lazy=True)
    loans = db.relationship('Loan', backref='employee', lazy=True)
    payrolls = db.relationship('Payroll', backref='employee', lazy=True)

    @property
    def total_allowances(self):
        return sum(allowance.amount for allowance in self.allowances)


class EmployeeAllowance(db.Model):
    __tablename__ = 'employee_allowances'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    amount = db.Column(db.Float, nullable=False, default=0)


class Loan(db.Model):
    __tablename__ = 'loans'

    id = db.Column(db.Integer, primary_key=True)
    loan_id = db.Column(db.String(40), nullable=False, unique=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    purpose = db.Column(db.String(255), nullable=False)
    start_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    remaining_amount = db.Column(db.Float, nullable=False)
    # pending, active, completed, rejected or cancelled
    status = db.Column(db.String(20), nullable=False, default="pending")


class Payroll(db.Model):
    __tablename__ = 'payrolls'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('employees.id'), nullable=False)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=True)
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    total_earnings = db.Column(db.Float, nullable=False, default=0)
    epf_employee = db.Column(db.Float, nullable=False, default=0)
    epf_employer = db.Column(db.Float, nullable=False, default=0)
    etf = db.Column(db.Float, nullable=False, default=0)
    payment_status = db.Column(db.String(20), nullable=False, default="Pending")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
