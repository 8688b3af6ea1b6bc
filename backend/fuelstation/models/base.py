from datetime import datetime
from fuelstation.extensions import db
import enum

class SoftDeleteMixin:
    deleted = db.Column(db.Boolean, default=False, nullable=False)
    deleted_at = db.Column(db.DateTime)

    def soft_delete(self):
        self.deleted = True
        self.deleted_at = datetime.utcnow()

    def restore(self):
        self.deleted = False
        self.deleted_at = None

class RoleEnum(enum.Enum):
    admin = "admin"
    manager = "manager"
    accountant = "accountant"
    employee = "employee"

class FuelTypeEnum(enum.Enum):
    petrol_92 = "Petrol 92"
    petrol_95 = "Petrol 95"
    auto_diesel = "Auto Diesel"
    super_diesel = "Super Diesel"
    kerosene = "Kerosene"

class TransactionTypeEnum(enum.Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"
