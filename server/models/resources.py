"""Request body models for back-office resource writes.

Each resource has a create model (required columns enforced) and an update
model (every column optional, at least one required). Unknown columns are
rejected so typos never reach the records backend.
"""

from datetime import date, datetime, time
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, HttpUrl, model_validator

PHONE_PATTERN = r"^\+?[\d\s\-\(\)]+$"

LeadStatus = Literal["new", "contacted", "qualified", "converted", "lost"]
ExpenseType = Literal["packaging", "salary", "printing", "return_shipping", "lead_cost", "other"]
ReminderType = Literal["lead_followup", "expense_review", "inventory_check", "general"]
ReminderPriority = Literal["low", "normal", "high", "urgent"]
ReminderStatus = Literal["pending", "completed", "cancelled"]


# =============================================================================
# BASE MODELS
# =============================================================================

class RecordCreate(BaseModel):
    model_config = {"extra": "forbid"}


class RecordUpdate(BaseModel):
    """Partial update. Only fields the client sent are written."""
    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def require_a_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field is required")
        return self


# =============================================================================
# CUSTOMERS
# =============================================================================

class CustomerCreate(RecordCreate):
    name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=50)
    state: Optional[str] = Field(default=None, max_length=50)
    country: Optional[str] = Field(default=None, max_length=50)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=500)


class CustomerUpdate(RecordUpdate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=50)
    state: Optional[str] = Field(default=None, max_length=50)
    country: Optional[str] = Field(default=None, max_length=50)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseCreate(RecordCreate):
    type: ExpenseType
    description: str = Field(min_length=1, max_length=200)
    amount: float = Field(ge=0)
    expense_date: date
    order_id: Optional[UUID] = None
    lead_id: Optional[UUID] = None
    receipt_url: Optional[HttpUrl] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class ExpenseUpdate(RecordUpdate):
    type: Optional[ExpenseType] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[float] = Field(default=None, ge=0)
    expense_date: Optional[date] = None
    order_id: Optional[UUID] = None
    lead_id: Optional[UUID] = None
    receipt_url: Optional[HttpUrl] = None
    notes: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# LEADS
# =============================================================================

class LeadCreate(RecordCreate):
    lead_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    source: str = Field(default="facebook", max_length=50)
    status: LeadStatus = "new"
    lead_cost: Optional[float] = Field(default=None, ge=0)
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=50)
    country: Optional[str] = Field(default=None, max_length=50)
    meta_lead_id: Optional[str] = None
    meta_click_id: Optional[str] = None
    customer_id: Optional[UUID] = None
    notes: Optional[str] = Field(default=None, max_length=500)


class LeadUpdate(RecordUpdate):
    lead_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    source: Optional[str] = Field(default=None, max_length=50)
    status: Optional[LeadStatus] = None
    lead_cost: Optional[float] = Field(default=None, ge=0)
    address: Optional[str] = Field(default=None, max_length=200)
    city: Optional[str] = Field(default=None, max_length=50)
    country: Optional[str] = Field(default=None, max_length=50)
    meta_lead_id: Optional[str] = None
    meta_click_id: Optional[str] = None
    customer_id: Optional[UUID] = None
    notes: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductCreate(RecordCreate):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    sku: Optional[str] = Field(default=None, max_length=64)
    cost_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True


class ProductUpdate(RecordUpdate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    sku: Optional[str] = Field(default=None, max_length=64)
    cost_price: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


# =============================================================================
# REMINDERS
# =============================================================================

class ReminderCreate(RecordCreate):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    reminder_type: ReminderType = "general"
    priority: ReminderPriority = "normal"
    status: ReminderStatus = "pending"
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    user_email: Optional[EmailStr] = None
    related_entity_type: Optional[str] = Field(default=None, max_length=50)
    related_entity_id: Optional[UUID] = None


class ReminderUpdate(RecordUpdate):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    reminder_type: Optional[ReminderType] = None
    priority: Optional[ReminderPriority] = None
    status: Optional[ReminderStatus] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    completed_at: Optional[datetime] = None
    related_entity_type: Optional[str] = Field(default=None, max_length=50)
    related_entity_id: Optional[UUID] = None


# =============================================================================
# SUPPLIERS
# =============================================================================

class SupplierCreate(RecordCreate):
    name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=500)


class SupplierUpdate(RecordUpdate):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=500)
