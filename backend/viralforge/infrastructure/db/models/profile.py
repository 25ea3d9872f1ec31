"""
Profile SQLModel for ViralForge AI

One row per authenticated user, keyed by the auth user id. Plan, comp and
kill-switch columns are written by the admin console and Stripe webhooks;
credit and XP balances only change through atomic statements or RPCs.
Profiles are never deleted.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict
from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from viralforge.domain.plans import PlanId
from viralforge.infrastructure.db.models.base import TimestampMixin


class Profile(TimestampMixin, table=True):
    """Profile database table model (matches the Supabase `profiles` table)."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "analysis_credit_balance >= 0",
            name="ck_profiles_analysis_credit_non_negative",
        ),
    )

    id: UUID = Field(primary_key=True, description="auth.users id")
    email: Optional[str] = Field(default=None, max_length=320, index=True)
    full_name: Optional[str] = Field(default=None, max_length=200)
    locale: str = Field(default="tr", max_length=5)
    niche: Optional[str] = Field(default=None, max_length=100)

    # Entitlement
    plan: str = Field(default=PlanId.FREE.value, max_length=10)
    comped_until: Optional[date] = Field(
        default=None,
        description="Temporary PRO access through this calendar day (inclusive)"
    )
    is_disabled: bool = Field(default=False, description="Account kill switch")

    # Balances
    analysis_credit_balance: int = Field(default=0, ge=0)
    xp_balance: int = Field(default=0, ge=0)

    # Billing
    stripe_customer_id: Optional[str] = Field(default=None, unique=True, index=True)
    subscription_status: Optional[str] = Field(default=None, max_length=30)


class ProfileRead(SQLModel):
    """Profile fields shown in the admin console."""

    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    plan: str
    comped_until: Optional[date] = None
    is_disabled: bool
    analysis_credit_balance: int
    xp_balance: int
    subscription_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
