"""
Application state for the register and the operations that change it.

``AppState`` is an immutable snapshot of every record. Each operation writes
through the store first and only returns a new snapshot once the write has
succeeded; if the write raises, the caller still holds the previous state.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Sequence, TypeVar

from continuity.core.database import db
from continuity.core.logging import log_audit_event, log_debug, log_error
from continuity.repositories import activities as activities_repo
from continuity.repositories import resources as resources_repo
from continuity.repositories import risks as risks_repo
from continuity.repositories import strategies as strategies_repo
from continuity.schemas.bia import (
    Activity,
    ActivityCreate,
    RecoveryStrategy,
    RecoveryStrategyCreate,
    Resource,
    ResourceCreate,
    Risk,
    RiskCreate,
)
from continuity.services import seeding

RecordT = TypeVar("RecordT", Resource, Activity, Risk, RecoveryStrategy)

AUDIT_EVENT = "BIA ACTION"


class EntityNotFoundError(LookupError):
    """Raised when an update or selection targets an unknown id."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found")


@dataclass(frozen=True)
class AppState:
    resources: tuple[Resource, ...] = ()
    activities: tuple[Activity, ...] = ()
    risks: tuple[Risk, ...] = ()
    strategies: tuple[RecoveryStrategy, ...] = ()

    def strategies_for(self, activity_id: str) -> tuple[RecoveryStrategy, ...]:
        return tuple(s for s in self.strategies if s.activity_id == activity_id)


async def open_store() -> bool:
    """Open the local store and apply pending migrations.

    Failures are logged, not raised; operations attempted afterwards raise
    ``StoreUnavailableError``.
    """
    try:
        await db.run_migrations()
    except Exception as exc:
        log_error("Failed to open local store", error=str(exc))
        await db.disconnect()
        return False
    return True


def new_id() -> str:
    return str(uuid.uuid4())


def find(records: Sequence[RecordT], record_id: str) -> RecordT | None:
    for record in records:
        if record.id == record_id:
            return record
    return None


def _require(records: Sequence[RecordT], record_id: str, entity_type: str) -> RecordT:
    record = find(records, record_id)
    if record is None:
        raise EntityNotFoundError(entity_type, record_id)
    return record


def _upsert(records: Sequence[RecordT], *updated: RecordT) -> tuple[RecordT, ...]:
    """Replace records by id in place, appending ids not seen before."""
    by_id = {record.id: record for record in updated}
    result = [by_id.pop(record.id, record) for record in records]
    result.extend(record for record in updated if record.id in by_id)
    return tuple(result)


def _without(records: Sequence[RecordT], record_id: str) -> tuple[RecordT, ...]:
    return tuple(record for record in records if record.id != record_id)


async def load_state(*, seed: bool = True) -> AppState:
    """Read every table, seeding the starter set into an empty register."""
    resources = await resources_repo.list_resources()
    activities = await activities_repo.list_activities()
    risks = await risks_repo.list_risks()
    strategies = await strategies_repo.list_strategies()

    state = AppState(tuple(resources), tuple(activities), tuple(risks), tuple(strategies))
    log_debug(
        "Loaded register",
        resources=len(resources),
        activities=len(activities),
        risks=len(risks),
        strategies=len(strategies),
    )
    if not seed:
        return state

    seeded = await seeding.seed_if_empty(resources, activities, strategies)
    if seeded is None:
        return state
    return AppState(
        resources=_upsert(state.resources, *seeded.resources),
        activities=_upsert(state.activities, *seeded.activities),
        risks=_upsert(state.risks, *seeded.risks),
        strategies=_upsert(state.strategies, *seeded.strategies),
    )


# ----------------------------------------------------------------------------
# Resources
# ----------------------------------------------------------------------------


async def save_resource(state: AppState, resource: Resource) -> AppState:
    await resources_repo.save_resource(resource)
    log_audit_event(AUDIT_EVENT, "save", entity_type="resource", entity_id=resource.id)
    return replace(state, resources=_upsert(state.resources, resource))


async def create_resource(
    state: AppState, payload: ResourceCreate
) -> tuple[AppState, Resource]:
    resource = Resource(id=new_id(), **payload.model_dump())
    return await save_resource(state, resource), resource


async def update_resource(
    state: AppState, resource_id: str, payload: ResourceCreate
) -> tuple[AppState, Resource]:
    _require(state.resources, resource_id, "resource")
    resource = Resource(id=resource_id, **payload.model_dump())
    return await save_resource(state, resource), resource


async def delete_resource(state: AppState, resource_id: str) -> AppState:
    """Delete a resource; activities keep any reference to it."""
    await resources_repo.delete_resource(resource_id)
    log_audit_event(AUDIT_EVENT, "delete", entity_type="resource", entity_id=resource_id)
    return replace(state, resources=_without(state.resources, resource_id))


# ----------------------------------------------------------------------------
# Activities
# ----------------------------------------------------------------------------


async def save_activity(state: AppState, activity: Activity) -> AppState:
    await activities_repo.save_activity(activity)
    log_audit_event(AUDIT_EVENT, "save", entity_type="activity", entity_id=activity.id)
    return replace(state, activities=_upsert(state.activities, activity))


async def create_activity(
    state: AppState, payload: ActivityCreate
) -> tuple[AppState, Activity]:
    activity = Activity(id=new_id(), **payload.model_dump())
    return await save_activity(state, activity), activity


async def update_activity(
    state: AppState, activity_id: str, payload: ActivityCreate
) -> tuple[AppState, Activity]:
    _require(state.activities, activity_id, "activity")
    activity = Activity(id=activity_id, **payload.model_dump())
    return await save_activity(state, activity), activity


async def delete_activity(state: AppState, activity_id: str) -> AppState:
    """Delete an activity; its strategies and risk links are left in place."""
    await activities_repo.delete_activity(activity_id)
    log_audit_event(AUDIT_EVENT, "delete", entity_type="activity", entity_id=activity_id)
    return replace(state, activities=_without(state.activities, activity_id))


# ----------------------------------------------------------------------------
# Risks
# ----------------------------------------------------------------------------


async def save_risk(state: AppState, risk: Risk) -> AppState:
    await risks_repo.save_risk(risk)
    log_audit_event(AUDIT_EVENT, "save", entity_type="risk", entity_id=risk.id)
    return replace(state, risks=_upsert(state.risks, risk))


async def create_risk(state: AppState, payload: RiskCreate) -> tuple[AppState, Risk]:
    risk = Risk(id=new_id(), **payload.model_dump())
    return await save_risk(state, risk), risk


async def update_risk(
    state: AppState, risk_id: str, payload: RiskCreate
) -> tuple[AppState, Risk]:
    _require(state.risks, risk_id, "risk")
    risk = Risk(id=risk_id, **payload.model_dump())
    return await save_risk(state, risk), risk


async def delete_risk(state: AppState, risk_id: str) -> AppState:
    await risks_repo.delete_risk(risk_id)
    log_audit_event(AUDIT_EVENT, "delete", entity_type="risk", entity_id=risk_id)
    return replace(state, risks=_without(state.risks, risk_id))


# ----------------------------------------------------------------------------
# Recovery strategies
# ----------------------------------------------------------------------------


async def save_strategy(state: AppState, strategy: RecoveryStrategy) -> AppState:
    """Insert or replace a strategy without changing which strategy is selected.

    An existing strategy keeps its stored selection flag, except that moving it
    to another activity clears the flag. A new strategy arriving already
    selected goes through :func:`select_strategy` so its activity keeps a
    single selection.
    """
    existing = find(state.strategies, strategy.id)
    if existing is not None:
        keep_selected = existing.is_selected and existing.activity_id == strategy.activity_id
        strategy = strategy.model_copy(update={"is_selected": keep_selected})
    elif strategy.is_selected:
        unselected = strategy.model_copy(update={"is_selected": False})
        return await _apply_selection(state, unselected)

    await strategies_repo.save_strategy(strategy)
    log_audit_event(AUDIT_EVENT, "save", entity_type="strategy", entity_id=strategy.id)
    return replace(state, strategies=_upsert(state.strategies, strategy))


async def create_strategy(
    state: AppState, payload: RecoveryStrategyCreate
) -> tuple[AppState, RecoveryStrategy]:
    strategy = RecoveryStrategy(id=new_id(), is_selected=False, **payload.model_dump())
    return await save_strategy(state, strategy), strategy


async def update_strategy(
    state: AppState, strategy_id: str, payload: RecoveryStrategyCreate
) -> tuple[AppState, RecoveryStrategy]:
    _require(state.strategies, strategy_id, "strategy")
    strategy = RecoveryStrategy(id=strategy_id, **payload.model_dump())
    new_state = await save_strategy(state, strategy)
    return new_state, _require(new_state.strategies, strategy_id, "strategy")


async def _apply_selection(state: AppState, target: RecoveryStrategy) -> AppState:
    changed: list[RecoveryStrategy] = []
    for strategy in state.strategies_for(target.activity_id):
        if strategy.id != target.id and strategy.is_selected:
            changed.append(strategy.model_copy(update={"is_selected": False}))
    changed.append(target.model_copy(update={"is_selected": True}))

    await strategies_repo.save_strategies(changed)
    log_audit_event(
        AUDIT_EVENT,
        "select",
        entity_type="strategy",
        entity_id=target.id,
        activity_id=target.activity_id,
        deselected=len(changed) - 1,
    )
    return replace(state, strategies=_upsert(state.strategies, *changed))


async def select_strategy(state: AppState, strategy_id: str) -> AppState:
    """Make a strategy the single selected strategy of its activity.

    The deselections and the selection are written as one batch.
    """
    target = _require(state.strategies, strategy_id, "strategy")
    return await _apply_selection(state, target)


async def delete_strategy(state: AppState, strategy_id: str) -> AppState:
    await strategies_repo.delete_strategy(strategy_id)
    log_audit_event(AUDIT_EVENT, "delete", entity_type="strategy", entity_id=strategy_id)
    return replace(state, strategies=_without(state.strategies, strategy_id))
