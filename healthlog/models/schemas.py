"""
Pydantic models for request validation

Required fields are declared Optional where the route reports a specific
400 message for them instead of the generic validation error.
"""
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


# --- Auth ---

class RegisterPayload(BaseModel):
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class LoginPayload(BaseModel):
    """username may also be an email address"""
    username: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: Optional[str] = Field(None, alias="oldPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class SettingsUpdate(BaseModel):
    # Any so that a non-boolean reaches the route and gets the 400 message
    show_womens_health: Any = None


# --- Medications ---

class MedicationPayload(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    stock: Optional[float] = None
    medication_times: Optional[str] = None  # e.g. "08:00,20:00"


class TakeMedicationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dosage_amount: float = Field(1, gt=0, alias="dosageAmount")


# --- Daily check-ins ---

class DailyItemPayload(BaseModel):
    item_name: Optional[str] = Field(None, max_length=255)
    item_type: Optional[str] = None  # 'daily' | 'one-time'


class DailyLogPayload(BaseModel):
    log_date: Optional[str] = None
    item_name: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


# --- Exercise ---

class ExercisePayload(BaseModel):
    log_date: Optional[str] = None
    exercise_name: Optional[str] = Field(None, max_length=255)
    duration_minutes: Optional[int] = Field(None, ge=0)
    sets: Optional[int] = Field(None, ge=0)
    reps: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


# --- Finance ---

class AccountPayload(BaseModel):
    account_name: Optional[str] = Field(None, max_length=100)
    initial_balance: Decimal = Decimal("0")


class TransactionPayload(BaseModel):
    account_id: Optional[int] = None
    transaction_type: Optional[str] = None  # 'income' | 'expense'
    amount: Optional[Decimal] = Field(None, gt=0)
    category: Optional[str] = None
    notes: Optional[str] = None
    transaction_date: Optional[str] = None


class LoanPayload(BaseModel):
    loan_type: str = "lend"  # 'lend' | 'borrow'
    person_name: Optional[str] = Field(None, max_length=100)
    amount: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    loan_date: Optional[str] = None
    account_id: Optional[int] = None


class LoanStatusPayload(BaseModel):
    status: Optional[str] = None  # 'paid' | 'unpaid'


class RepaymentPayload(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    account_id: Optional[int] = None
    repayment_date: Optional[str] = None


# --- Memos ---

class MemoPayload(BaseModel):
    task_name: Optional[str] = Field(None, max_length=500)
    priority: Optional[str] = None  # 'high' | 'medium' | 'low'


class MemoStatusPayload(BaseModel):
    is_completed: bool = False


# --- Menstrual cycle ---

class PeriodCreate(BaseModel):
    start_date: Optional[str] = None
    pain_level: Optional[str] = None
    flow_volume: Optional[str] = None
    notes: Optional[str] = None
    color: Optional[str] = None
    state: Optional[str] = None


class PeriodUpdate(BaseModel):
    """Partial update; only fields present in the request body are written"""
    end_date: Optional[str] = None
    pain_level: Optional[str] = None
    flow_volume: Optional[str] = None
    notes: Optional[str] = None
    color: Optional[str] = None
    state: Optional[str] = None


# --- Sex logs ---

class SexLogPayload(BaseModel):
    log_date: Optional[str] = None
    protection_method: Optional[str] = None


# --- Stool ---

class StoolPayload(BaseModel):
    log_date: Optional[str] = None
    stool_type: Optional[str] = None  # Bristol scale type
    notes: Optional[str] = None


# --- Weight ---

class WeightPayload(BaseModel):
    weight: Optional[float] = None
    log_datetime: Optional[str] = None


class HeightPayload(BaseModel):
    height: Any = None


# --- Admin ---

class AdminFlagPayload(BaseModel):
    is_admin: bool


# --- ShowAPI lookups ---

class DiseaseListQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = None
    classify_id: Optional[str] = Field(None, alias="classifyId")
    page: int = 1


class KnowledgeSearchQuery(BaseModel):
    key: Optional[str] = None
    tid: Optional[str] = None
    page: int = 1


class EncyclopediaQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_key: Optional[str] = Field(None, alias="searchKey")
    search_type: str = Field("1", alias="searchType")
    classify_id: str = Field("", alias="classifyId")
    page: int = 1
