import pytest

from continuity.api.dependencies.state import StateHolder
from continuity.core.database import StoreUnavailableError
from continuity.repositories import records
from continuity.repositories import strategies as strategies_repo
from continuity.schemas.bia import (
    ActivityCreate,
    RecoveryStrategyCreate,
    ResourceCreate,
    ResourceType,
    RiskCategory,
    RiskCreate,
)
from continuity.services import state as state_service


def _selected(strategies, activity_id):
    return [s.id for s in strategies if s.activity_id == activity_id and s.is_selected]


@pytest.mark.anyio
async def test_load_state_seeds_empty_store(store):
    state = await state_service.load_state()

    assert len(state.resources) == 4
    assert len(state.activities) == 2
    assert _selected(state.strategies, "act-1") == ["strat-1"]

    reloaded = await state_service.load_state()
    assert len(reloaded.resources) == 4
    assert {a.id for a in reloaded.activities} == {a.id for a in state.activities}


@pytest.mark.anyio
async def test_load_state_without_seeding(store):
    state = await state_service.load_state(seed=False)

    assert state == state_service.AppState()


@pytest.mark.anyio
async def test_create_update_delete_resource(store):
    state = state_service.AppState()

    state, resource = await state_service.create_resource(
        state, ResourceCreate(name="Generator", type=ResourceType.EQUIPMENT)
    )
    assert resource.id
    assert state.resources == (resource,)

    state, updated = await state_service.update_resource(
        state, resource.id, ResourceCreate(name="Backup generator", type=ResourceType.EQUIPMENT)
    )
    assert state.resources == (updated,)
    assert updated.id == resource.id

    state = await state_service.delete_resource(state, resource.id)
    assert state.resources == ()
    assert (await state_service.load_state(seed=False)).resources == ()


@pytest.mark.anyio
async def test_operations_return_new_state_without_mutating_input(store):
    before = state_service.AppState()

    after, _ = await state_service.create_activity(
        before, ActivityCreate(name="Payroll", department="HR")
    )

    assert before.activities == ()
    assert len(after.activities) == 1


@pytest.mark.anyio
async def test_update_unknown_id_raises(store):
    state = state_service.AppState()

    with pytest.raises(state_service.EntityNotFoundError):
        await state_service.update_risk(
            state,
            "missing",
            RiskCreate(description="Fire", category=RiskCategory.PHYSICAL, likelihood=1, impact=1),
        )
    with pytest.raises(state_service.EntityNotFoundError):
        await state_service.select_strategy(state, "missing")


@pytest.mark.anyio
async def test_selecting_strategy_deselects_the_previous_one(store):
    state = await state_service.load_state()

    state = await state_service.select_strategy(state, "strat-2")

    assert _selected(state.strategies, "act-1") == ["strat-2"]
    persisted = await strategies_repo.list_strategies()
    assert _selected(persisted, "act-1") == ["strat-2"]


@pytest.mark.anyio
async def test_selection_is_scoped_to_the_activity(store):
    state = await state_service.load_state()
    state, other = await state_service.create_strategy(
        state, RecoveryStrategyCreate(activity_id="act-2", name="Manual payroll")
    )
    assert not other.is_selected

    state = await state_service.select_strategy(state, other.id)

    assert _selected(state.strategies, "act-2") == [other.id]
    assert _selected(state.strategies, "act-1") == ["strat-1"]


@pytest.mark.anyio
async def test_editing_keeps_selection_and_moving_clears_it(store):
    state = await state_service.load_state()

    state, edited = await state_service.update_strategy(
        state,
        "strat-1",
        RecoveryStrategyCreate(activity_id="act-1", name="Remote work (VPN)"),
    )
    assert edited.is_selected
    assert _selected(state.strategies, "act-1") == ["strat-1"]

    state, moved = await state_service.update_strategy(
        state,
        "strat-1",
        RecoveryStrategyCreate(activity_id="act-2", name="Remote work (VPN)"),
    )
    assert not moved.is_selected
    assert _selected(state.strategies, "act-1") == []
    assert _selected(state.strategies, "act-2") == []


@pytest.mark.anyio
async def test_saving_new_selected_strategy_keeps_single_selection(store):
    state = await state_service.load_state()
    incoming = state_service.find(state.strategies, "strat-2").model_copy(
        update={"id": "strat-3", "is_selected": True}
    )

    state = await state_service.save_strategy(state, incoming)

    assert _selected(state.strategies, "act-1") == ["strat-3"]
    assert _selected(await strategies_repo.list_strategies(), "act-1") == ["strat-3"]


@pytest.mark.anyio
async def test_deleting_activity_leaves_its_strategies(store):
    state = await state_service.load_state()

    state = await state_service.delete_activity(state, "act-1")

    assert state_service.find(state.activities, "act-1") is None
    assert len(state.strategies_for("act-1")) == 2


@pytest.mark.anyio
async def test_failed_write_keeps_previous_state(store, monkeypatch):
    holder = StateHolder(await state_service.load_state())
    before = holder.state

    async def failing_write(table, record_id, statement):
        raise records.WriteFailedError(table, record_id, "disk full")

    monkeypatch.setattr(records, "write", failing_write)

    with pytest.raises(records.WriteFailedError):
        await holder.apply(
            state_service.create_resource,
            ResourceCreate(name="Generator", type=ResourceType.EQUIPMENT),
        )

    assert holder.state is before


@pytest.mark.anyio
async def test_failed_selection_batch_changes_nothing(store):
    holder = StateHolder(await state_service.load_state())
    before = holder.state
    await store.execute(
        """
        CREATE TRIGGER reject_strat_2 BEFORE UPDATE ON strategies
        WHEN NEW.id = 'strat-2'
        BEGIN SELECT RAISE(ABORT, 'rejected'); END
        """
    )

    with pytest.raises(records.WriteFailedError):
        await holder.apply(state_service.select_strategy, "strat-2")

    assert holder.state is before
    assert _selected(await strategies_repo.list_strategies(), "act-1") == ["strat-1"]


@pytest.mark.anyio
async def test_holder_returns_created_record(store):
    holder = StateHolder()

    risk = await holder.apply(
        state_service.create_risk,
        RiskCreate(description="Flood", category=RiskCategory.PHYSICAL, likelihood=2, impact=4),
    )

    assert holder.state.risks == (risk,)
    assert await holder.apply(state_service.delete_risk, risk.id) is None
    assert holder.state.risks == ()


@pytest.mark.anyio
async def test_unavailable_holder_refuses_writes(store):
    holder = StateHolder(await state_service.load_state())
    holder.mark_unavailable("unreadable record")

    with pytest.raises(StoreUnavailableError):
        await holder.apply(state_service.select_strategy, "strat-2")

    assert _selected(await strategies_repo.list_strategies(), "act-1") == ["strat-1"]
