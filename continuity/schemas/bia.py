"""
Pydantic schemas for the Business Impact Analysis register.

Records are persisted and served with camelCase field names, and enum members
carry the exact strings stored on disk.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================


class ImpactLevel(str, Enum):
    """Ordered impact/priority levels, least severe first."""

    NEGLIGIBLE = "Negligible"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"
    CATASTROPHIC = "Catastrophic"


class RecoveryTimeObjective(str, Enum):
    RTO_1H = "1 Hour"
    RTO_4H = "4 Hours"
    RTO_24H = "24 Hours"
    RTO_48H = "48 Hours"
    RTO_1W = "1 Week"
    RTO_2W = "2 Weeks"
    RTO_1M = "1 Month"


class RecoveryPointObjective(str, Enum):
    RPO_0 = "0 Minutes (Real-time)"
    RPO_1H = "1 Hour"
    RPO_4H = "4 Hours"
    RPO_24H = "24 Hours"


class ResourceType(str, Enum):
    PEOPLE = "People"
    IT_SYSTEM = "IT System"
    FACILITY = "Facility"
    EQUIPMENT = "Equipment"
    VENDOR = "Vendor"


class RiskCategory(str, Enum):
    TECHNOLOGY = "Technology"
    PERSONNEL = "Personnel"
    PHYSICAL = "Physical/Facility"
    SUPPLY_CHAIN = "Supply Chain"
    REGULATORY = "Regulatory"
    REPUTATIONAL = "Reputational"


class RiskTreatment(str, Enum):
    ACCEPT = "Accept"
    MITIGATE = "Mitigate"
    TRANSFER = "Transfer"
    AVOID = "Avoid"


class Rating(str, Enum):
    """Three-step rating used for strategy cost and feasibility."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ============================================================================
# Helpers
# ============================================================================


class CamelModel(BaseModel):
    """Immutable model serialised with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


def _require_text(value: str) -> str:
    text = value.strip()
    if not text:
        raise ValueError("must not be blank")
    return text


def _unique_ids(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


# ============================================================================
# Resources
# ============================================================================


class ResourceBase(CamelModel):
    """Base schema for a supporting resource."""

    name: str = Field(..., max_length=255)
    type: ResourceType
    description: str = ""

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        return _require_text(value)


class ResourceCreate(ResourceBase):
    pass


class Resource(ResourceBase):
    id: str = Field(..., min_length=1)


# ============================================================================
# Activities
# ============================================================================


class ImpactAssessment(CamelModel):
    """Impact of disrupting an activity for a given timeframe."""

    timeframe: str = Field(..., min_length=1, max_length=50)
    financial_impact: ImpactLevel = ImpactLevel.NEGLIGIBLE
    operational_impact: ImpactLevel = ImpactLevel.NEGLIGIBLE
    reputational_impact: ImpactLevel = ImpactLevel.NEGLIGIBLE
    legal_impact: ImpactLevel = ImpactLevel.NEGLIGIBLE
    description: str = ""


class ActivityBase(CamelModel):
    """Base schema for a business activity."""

    name: str = Field(..., max_length=255)
    department: str = Field(..., max_length=255)
    description: str = ""
    priority: ImpactLevel = ImpactLevel.MEDIUM
    rto: RecoveryTimeObjective = RecoveryTimeObjective.RTO_24H
    rpo: RecoveryPointObjective = RecoveryPointObjective.RPO_24H
    mtpd: str = ""
    resources: list[str] = Field(default_factory=list)
    impacts: list[ImpactAssessment] = Field(default_factory=list)

    @field_validator("name", "department")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("resources")
    @classmethod
    def _dedupe_resources(cls, value: list[str]) -> list[str]:
        return _unique_ids(value)


class ActivityCreate(ActivityBase):
    pass


class Activity(ActivityBase):
    id: str = Field(..., min_length=1)


# ============================================================================
# Risks
# ============================================================================


class RiskBase(CamelModel):
    """Base schema for a risk register entry."""

    description: str = Field(..., max_length=5000)
    category: RiskCategory
    likelihood: int = Field(..., ge=1, le=5, description="1=Rare .. 5=Almost Certain")
    impact: int = Field(..., ge=1, le=5, description="1=Negligible .. 5=Catastrophic")
    related_activity_ids: list[str] = Field(default_factory=list)
    existing_controls: str = ""
    treatment: RiskTreatment = RiskTreatment.MITIGATE

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("related_activity_ids")
    @classmethod
    def _dedupe_activities(cls, value: list[str]) -> list[str]:
        return _unique_ids(value)


class RiskCreate(RiskBase):
    pass


class Risk(RiskBase):
    id: str = Field(..., min_length=1)


# ============================================================================
# Recovery strategies
# ============================================================================


class RecoveryStrategyBase(CamelModel):
    """Base schema for a candidate recovery strategy of one activity."""

    activity_id: str
    name: str = Field(..., max_length=255)
    description: str = ""
    cost: Rating = Rating.MEDIUM
    feasibility: Rating = Rating.MEDIUM
    rto_achievable: RecoveryTimeObjective = RecoveryTimeObjective.RTO_24H

    @field_validator("activity_id", "name")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return _require_text(value)


class RecoveryStrategyCreate(RecoveryStrategyBase):
    pass


class RecoveryStrategy(RecoveryStrategyBase):
    id: str = Field(..., min_length=1)
    is_selected: bool = False


# ============================================================================
# Settings
# ============================================================================


class BIASettings(CamelModel):
    """Organisation-wide assessment parameters."""

    organization_name: str
    standard: str
    currency: str
    review_cycle_months: int
