"""
Pydantic schemas for Expense entity.
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Dict, List, Optional, Union
from datetime import date, datetime
from decimal import Decimal
from travelmgr.core.utils import round_money
from travelmgr.models.expense import ExpenseCategory, SplitType
from travelmgr.schemas.user import UserSummary

# Field names below shadow the type inside class bodies
date_type = date

# Largest value of a Numeric(15, 2) column
MAX_AMOUNT = Decimal("9999999999999.99")


class SplitParticipantInput(BaseModel):
    """A participant in a split request; amount or percentage depends on split type."""
    user_id: int = Field(validation_alias=AliasChoices("user_id", "userId", "user"))
    amount: Optional[Decimal] = None  # unequal splits
    percentage: Optional[Decimal] = None  # percentage splits


# Equal splits may pass bare user ids
ParticipantInput = Union[int, SplitParticipantInput]


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    amount: Decimal = Field(ge=0, le=MAX_AMOUNT)
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: Optional[date_type] = None  # Defaults to today
    is_split: bool = False
    split_type: SplitType = SplitType.EQUAL
    participants: List[ParticipantInput] = []
    paid_by: Optional[int] = None  # Defaults to the creator

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v: Decimal) -> Decimal:
        """Amounts are stored to the cent."""
        return round_money(v)


class ExpenseUpdate(BaseModel):
    """Schema for expense update. Omitted fields keep their stored value."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0, le=MAX_AMOUNT)
    category: Optional[ExpenseCategory] = None
    date: Optional[date_type] = None
    is_split: Optional[bool] = None
    split_type: Optional[SplitType] = None
    participants: Optional[List[ParticipantInput]] = None
    paid_by: Optional[int] = None

    @field_validator("amount")
    @classmethod
    def round_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else round_money(v)


class ExpenseParticipantResponse(BaseModel):
    """Schema for expense participant response."""
    id: int  # Entry id, used to toggle payment status
    user: UserSummary
    amount: Decimal
    percentage: Optional[Decimal] = None
    paid: bool

    class Config:
        from_attributes = True


class ExpenseResponse(BaseModel):
    """Schema for expense response, expanded for the requesting user."""
    id: int
    user_id: int  # Owner
    title: str
    description: Optional[str] = None
    amount: Decimal
    category: ExpenseCategory
    date: date_type
    is_split: bool
    split_type: SplitType
    paid_by: UserSummary
    participants: List[ExpenseParticipantResponse] = []
    my_share: Decimal  # Share of the requesting user, rounded for display
    payer_share: Decimal  # Amount left to the payer after participants
    created_at: datetime
    updated_at: datetime


CategoryStatsResponse = Dict[str, Decimal]
