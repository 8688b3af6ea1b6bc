from datetime import datetime
from fuelstation.extensions import db

class FuelInventory(db.Model):
    __tablename__ = 'fuel_inventory'

    id = db.Column(db.Integer, primary_key=True)
    station_id = db.Column(db.Integer, db.ForeignKey('stations.id'), nullable=False)
    fuel_type = db.Column(db.String(40), nullable=False)
    tank_id = db.Column(db.String(20), nullable=False)
    tank_capacity = db.Column(db.Float, nullable=False)
    current_volume = db.Column(db.Float, nullable=False, default=0)
    cost_price = db.Column(db.Float, nullable=False, default=0)
    selling_price = db.Column(db.Float, nullable=False, default=0)
    last_stock_update = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def stock_value(self):
        return self.current_volume * self.cost_price
