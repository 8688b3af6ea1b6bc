from datetime import datetime
from fuelstation.extensions import db

class Sale(db.Model):
    __tablename__ = 'sales'

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.String(40), nullable=False, unique=True)
    date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=False)
    fuel_type = db.Column(db.String(40), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    total_amount = db.Column(db.Float, nullable=False)
    payment_method = db.Column(db.String(20), nullable=False, default="Cash")
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=True)
    vehicle_number = db.Column(db.String(20), nullable=True)
