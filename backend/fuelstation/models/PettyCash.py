from datetime import datetime
from fuelstation.extensions import db

class PettyCashBalance(db.Model):
    __tablename__ = 'petty_cash_balances'

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=False, unique=True)
    current_balance = db.Column(db.Float, nullable=False, default=0)
    max_limit = db.Column(db.Float, nullable=False, default=10000)
    min_limit = db.Column(db.Float, nullable=False, default=2000)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
