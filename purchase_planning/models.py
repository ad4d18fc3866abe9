# purchase_planning/models.py
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, JSON, Index
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import enum

Base = declarative_base()

class SupplierBillCategory(enum.Enum):
    """Groups of supplier bills paid from the month's cash.

    Values:
        REGULAR ('PROVEEDORES'): Regular merchandise suppliers
        TECNOS ('TECNOS'): Tecnos bills, tracked on their own
        DECAM ('DECAM'): Decam bills, tracked on their own
    """
    REGULAR = 'PROVEEDORES'
    TECNOS = 'TECNOS'
    DECAM = 'DECAM'

class DepositConcept(enum.Enum):
    CARDS = 'TARJETAS'
    CASH = 'EFECTIVO'
    ADVANCE = 'ANTICIPO'

class Supplier(Base):
    __tablename__ = 'suppliers'

    id = Column(String(36), primary_key=True)
    name = Column(String(200), nullable=False)
    # Markup factor, sale price / cost. Legacy rows may hold 170 for 1.70.
    factor = Column(Float)
    credit_days = Column(Integer)

    sales = relationship("Sale", back_populates="supplier")
    purchases = relationship("Purchase", back_populates="supplier")

class Sale(Base):
    __tablename__ = 'sales'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Float, default=0.0)
    supplier_id = Column(String(36), ForeignKey('suppliers.id'), nullable=False)
    notes = Column(Text)

    supplier = relationship("Supplier", back_populates="sales")

    __table_args__ = (
        Index('ix_sales_date_supplier', 'date', 'supplier_id'),
    )

class Purchase(Base):
    """Supplier invoice (accounts payable)."""
    __tablename__ = 'purchases'

    id = Column(Integer, primary_key=True)
    invoice_date = Column(Date)
    pay_date = Column(Date)
    paid_at = Column(Date)
    amount = Column(Float, default=0.0)
    supplier_id = Column(String(36), ForeignKey('suppliers.id'), nullable=False)
    invoice_ref = Column(String(100))

    supplier = relationship("Supplier", back_populates="purchases")

class AppParam(Base):
    __tablename__ = 'app_params'

    key = Column(String(100), primary_key=True)
    value_num = Column(Float)
    value_text = Column(Text)
    value_date = Column(Date)

class PurchasePlan(Base):
    """Saved purchase plan header. Saved plans are never updated."""
    __tablename__ = 'purchase_plans'

    id = Column(Integer, primary_key=True)
    plan_month = Column(Date, nullable=False)
    method = Column(String(20), nullable=False)
    weights = Column(JSON)
    policy = Column(String(20), default='restock')
    budget = Column(Float, default=0.0)
    scale = Column(Float, default=1.0)
    totals = Column(JSON)
    created_at = Column(DateTime, server_default=func.now())

    lines = relationship(
        "PurchasePlanLine",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PurchasePlanLine.id"
    )

class PurchasePlanLine(Base):
    __tablename__ = 'purchase_plan_lines'

    id = Column(Integer, primary_key=True)
    plan_id = Column(Integer, ForeignKey('purchase_plans.id', ondelete='CASCADE'), nullable=False)
    supplier_id = Column(String(36), nullable=False)
    supplier_name = Column(String(200))
    factor = Column(Float)
    forecast_next = Column(Float, default=0.0)
    proposed = Column(Float, default=0.0)
    restock = Column(Float, default=0.0)
    mix = Column(Float, default=0.0)
    final = Column(Float, default=0.0)

    plan = relationship("PurchasePlan", back_populates="lines")

class InvoiceDaily(Base):
    """Invoiced sales of a day, split by product family."""
    __tablename__ = 'finance_invoices_daily'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    cartuchos = Column(Float, default=0.0)
    comerciales = Column(Float, default=0.0)
    importados = Column(Float, default=0.0)
    total = Column(Float, default=0.0)

class Deposit(Base):
    __tablename__ = 'finance_deposits'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    bank = Column(String(20))
    concept = Column(String(50))
    amount = Column(Float, default=0.0)
    notes = Column(Text)

class ClientBankPayment(Base):
    __tablename__ = 'finance_client_bank_payments'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    bank = Column(String(20))
    client = Column(String(200))
    invoice_ref = Column(String(100))
    amount = Column(Float, default=0.0)
    notes = Column(Text)

class Voucher(Base):
    __tablename__ = 'finance_vouchers'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    concept = Column(String(200))
    amount = Column(Float, default=0.0)
    notes = Column(Text)

class PendingPayment(Base):
    """Invoiced amount not yet collected from a client."""
    __tablename__ = 'finance_pending_payments'

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    client = Column(String(200))
    amount = Column(Float, default=0.0)
    notes = Column(Text)

class SupplierBill(Base):
    __tablename__ = 'finance_supplier_bills'

    id = Column(Integer, primary_key=True)
    category = Column(String(20), default=SupplierBillCategory.REGULAR.value)
    supplier_name = Column(String(200))
    invoice_date = Column(Date)
    paid_at = Column(Date)
    amount = Column(Float, default=0.0)
    paid_amount = Column(Float, default=0.0)

class Expense(Base):
    """Operating expense (not merchandise)."""
    __tablename__ = 'finance_expenses'

    id = Column(Integer, primary_key=True)
    concept = Column(String(200))
    exp_date = Column(Date)
    paid_at = Column(Date)
    amount = Column(Float, default=0.0)
    paid_amount = Column(Float, default=0.0)

class FinanceDay(Base):
    """Daily cash cut; ``go_del_dia`` is the operating budget the day produced."""
    __tablename__ = 'finance_days'

    id = Column(Integer, primary_key=True)
    day = Column(Date, nullable=False, unique=True)
    go_del_dia = Column(Float, default=0.0)
    totals = Column(JSON)
