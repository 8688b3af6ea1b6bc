from datetime import datetime
from fuelstation.extensions import db

class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    expense_id = db.Column(db.String(40), nullable=False, unique=True)
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=True)
    category = db.Column(db.String(40), nullable=False)
    description = db.Column(db.String(255), nullable=True)
    amount = db.Column(db.Float, nullable=False)
    payment_method = db.Column(db.String(20), nullable=True, default="Cash")
    # Pending, Approved or Rejected; only approved expenses are reported.
    approval_status = db.Column(db.String(20), nullable=False, default="Pending")
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
