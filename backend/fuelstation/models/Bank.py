from datetime import datetime
from fuelstation.extensions import db

class BankAccount(db.Model):
    __tablename__ = 'bank_accounts'

    id = db.Column(db.Integer, primary_key=True)
    account_name = db.Column(db.String(120), nullable=False)
    account_number = db.Column(db.String(40), nullable=True)
    bank_name = db.Column(db.String(120), nullable=False)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=True)
    opening_balance = db.Column(db.Float, nullable=False, default=0)
    current_balance = db.Column(db.Float, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    transactions = db.relationship('BankTransaction', back_populates='account', lazy=True)


class BankTransaction(db.Model):
    __tablename__ = 'bank_transactions'

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.String(40), nullable=False, unique=True)
    account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'), nullable=False)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=True)
    amount = db.Column(db.Float, nullable=False)
    type = db.Column(db.String(20), nullable=False)  # deposit / withdrawal
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    description = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(40), nullable=False, default="Uncategorized")
    reference = db.Column(db.String(80), nullable=True)

    account = db.relationship('BankAccount', back_populates='transactions')
