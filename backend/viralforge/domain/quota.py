"""
Quota Domain Models

DTOs returned by the quota gate and exposed through the usage endpoints.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from viralforge.domain.plans import (
    LimitKey,
    PlanId,
    UsageStatus,
    calculate_usage_status,
)


class FeatureCheck(BaseModel):
    """Outcome of a quota check for one metered feature."""
    feature: LimitKey
    status: UsageStatus
    allowed: bool
    used: int = 0
    limit: Optional[int] = Field(default=None, description="None when unlimited")
    remaining: Optional[int] = Field(default=None, description="None when unlimited")
    used_credit: bool = Field(
        default=False,
        description="Allowed by spending one analysis credit",
    )

    @property
    def unlimited(self) -> bool:
        return self.limit is None and self.status != UsageStatus.BLOCKED

    @classmethod
    def unlimited_for(cls, feature: LimitKey, used: int = 0) -> "FeatureCheck":
        return cls(feature=feature, status=UsageStatus.OK, allowed=True, used=used)

    @classmethod
    def blocked_for(cls, feature: LimitKey, used: int = 0, limit: int = 0) -> "FeatureCheck":
        return cls(
            feature=feature,
            status=UsageStatus.BLOCKED,
            allowed=False,
            used=used,
            limit=limit,
            remaining=0,
        )

    @classmethod
    def from_usage(cls, feature: LimitKey, used: int, limit: int) -> "FeatureCheck":
        status = calculate_usage_status(used, limit)
        return cls(
            feature=feature,
            status=status,
            allowed=status != UsageStatus.BLOCKED,
            used=used,
            limit=limit,
            remaining=max(0, limit - used),
        )

    def with_credit(self) -> "FeatureCheck":
        """The same daily picture, authorized through the credit balance."""
        return self.model_copy(update={"allowed": True, "used_credit": True})

    def usage_payload(self) -> Dict[str, Optional[int]]:
        """The `usage` block included in successful metered responses."""
        return {"limit": self.limit, "remaining": self.remaining}


class UsageSummary(BaseModel):
    """Per-feature quota picture for the account page."""
    day: str
    plan: PlanId
    effective_plan: PlanId
    is_comped: bool
    is_disabled: bool
    analysis_credit_balance: int
    features: Dict[LimitKey, FeatureCheck]
