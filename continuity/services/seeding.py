"""
Starter data for an empty register.

Seeding runs only when both the resource and the activity tables are empty.
It is a demo convenience, not a migration: there is no version tracking.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from continuity.core.logging import log_info
from continuity.repositories import activities as activities_repo
from continuity.repositories import records
from continuity.repositories import resources as resources_repo
from continuity.repositories import risks as risks_repo
from continuity.repositories import strategies as strategies_repo
from continuity.schemas.bia import (
    Activity,
    ImpactLevel,
    Rating,
    RecoveryPointObjective,
    RecoveryStrategy,
    RecoveryTimeObjective,
    Resource,
    ResourceType,
    Risk,
    RiskCategory,
    RiskTreatment,
)


@dataclass(frozen=True)
class SeedData:
    resources: tuple[Resource, ...]
    activities: tuple[Activity, ...]
    risks: tuple[Risk, ...]
    strategies: tuple[RecoveryStrategy, ...]


def default_seed() -> SeedData:
    resources = (
        Resource(
            id="res-1",
            name="AWS Cloud Infrastructure",
            type=ResourceType.IT_SYSTEM,
            description="Core hosting environment for all apps",
        ),
        Resource(
            id="res-2",
            name="Customer Support Team",
            type=ResourceType.PEOPLE,
            description="Level 1 and 2 support agents (24/7)",
        ),
        Resource(
            id="res-3",
            name="HQ Office - New York",
            type=ResourceType.FACILITY,
            description="Primary office location, 500 seats",
        ),
        Resource(
            id="res-4",
            name="Payroll SaaS",
            type=ResourceType.IT_SYSTEM,
            description="Third party payroll provider",
        ),
    )
    activities = (
        Activity(
            id="act-1",
            name="Customer Ticket Resolution",
            department="Support",
            description="Handling incoming customer issues via email and phone.",
            priority=ImpactLevel.HIGH,
            rto=RecoveryTimeObjective.RTO_4H,
            rpo=RecoveryPointObjective.RPO_1H,
            mtpd="24 Hours",
            resources=["res-2", "res-1"],
        ),
        Activity(
            id="act-2",
            name="Monthly Payroll Run",
            department="HR",
            description="Processing employee salaries and tax deductions.",
            priority=ImpactLevel.CRITICAL,
            rto=RecoveryTimeObjective.RTO_1W,
            rpo=RecoveryPointObjective.RPO_24H,
            mtpd="5 Days",
            resources=["res-4"],
        ),
    )
    risks = (
        Risk(
            id="risk-1",
            description="Ransomware attack encrypting customer database",
            category=RiskCategory.TECHNOLOGY,
            likelihood=3,
            impact=5,
            related_activity_ids=["act-1"],
            existing_controls="Daily immutable backups, Endpoint protection",
            treatment=RiskTreatment.MITIGATE,
        ),
        Risk(
            id="risk-2",
            description="Key personnel unavailability during flu season",
            category=RiskCategory.PERSONNEL,
            likelihood=4,
            impact=3,
            related_activity_ids=["act-1", "act-2"],
            existing_controls="Cross-training program",
            treatment=RiskTreatment.ACCEPT,
        ),
    )
    strategies = (
        RecoveryStrategy(
            id="strat-1",
            activity_id="act-1",
            name="Remote Work Activation",
            description="Shift all support agents to work-from-home via VPN.",
            cost=Rating.LOW,
            feasibility=Rating.HIGH,
            rto_achievable=RecoveryTimeObjective.RTO_1H,
            is_selected=True,
        ),
        RecoveryStrategy(
            id="strat-2",
            activity_id="act-1",
            name="Outsource Spillover",
            description="Route calls to 3rd party BPO vendor.",
            cost=Rating.HIGH,
            feasibility=Rating.MEDIUM,
            rto_achievable=RecoveryTimeObjective.RTO_4H,
            is_selected=False,
        ),
    )
    return SeedData(resources, activities, risks, strategies)


def _keep_existing_selections(
    seed: SeedData, existing: list[RecoveryStrategy]
) -> SeedData:
    """Unselect seeded strategies of activities that already have a stored selection.

    Stored strategies sharing a seeded id are overwritten and do not count.
    """
    seeded_ids = {strategy.id for strategy in seed.strategies}
    taken = {
        strategy.activity_id
        for strategy in existing
        if strategy.is_selected and strategy.id not in seeded_ids
    }
    if not taken:
        return seed
    strategies = tuple(
        strategy.model_copy(update={"is_selected": False})
        if strategy.activity_id in taken
        else strategy
        for strategy in seed.strategies
    )
    return replace(seed, strategies=strategies)


async def seed_if_empty(
    resources: list[Resource] | None = None,
    activities: list[Activity] | None = None,
    strategies: list[RecoveryStrategy] | None = None,
) -> SeedData | None:
    """Write the starter set when no resources and no activities exist.

    Already loaded collections may be passed to avoid reading them again.
    Strategies left over in an otherwise empty register keep their selection;
    a seeded strategy for the same activity is then written unselected.
    Returns the written set, or ``None`` when seeding was skipped.
    """
    if resources is None:
        resources = await resources_repo.list_resources()
    if activities is None:
        activities = await activities_repo.list_activities()
    if resources or activities:
        return None
    if strategies is None:
        strategies = await strategies_repo.list_strategies()

    seed = _keep_existing_selections(default_seed(), strategies)
    statements = [
        *(records.upsert_statement(resources_repo.TABLE, item) for item in seed.resources),
        *(records.upsert_statement(activities_repo.TABLE, item) for item in seed.activities),
        *(records.upsert_statement(risks_repo.TABLE, item) for item in seed.risks),
        *(strategies_repo.upsert_statement(item) for item in seed.strategies),
    ]
    await records.write_batch("seed", statements)
    log_info(
        "Seeded empty register with starter data",
        resources=len(seed.resources),
        activities=len(seed.activities),
        risks=len(seed.risks),
        strategies=len(seed.strategies),
    )
    return seed
