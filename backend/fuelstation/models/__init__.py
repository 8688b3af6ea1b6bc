from .User import User, Role, TokenBlocklist
from .Station import Station
from .Sales import Sale
from .Expense import Expense
from .Bank import BankAccount, BankTransaction
from .PettyCash import PettyCashBalance
from .Customer import Customer
from .FuelInventory import FuelInventory
from .Employee import Employee, EmployeeAllowance, Loan, Payroll
from .AuditLog import AuditLog
from .base import SoftDeleteMixin, RoleEnum, FuelTypeEnum, TransactionTypeEnum
