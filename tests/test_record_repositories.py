import aiosqlite
import pytest

from continuity.core.database import Database, StoreUnavailableError
from continuity.repositories import activities as activities_repo
from continuity.repositories import records
from continuity.repositories import resources as resources_repo
from continuity.repositories import risks as risks_repo
from continuity.repositories import strategies as strategies_repo
from continuity.schemas.bia import (
    Activity,
    ImpactLevel,
    RecoveryStrategy,
    Resource,
    ResourceType,
    Risk,
    RiskCategory,
)


@pytest.mark.anyio
async def test_resource_upsert_replaces_by_id(store):
    await resources_repo.save_resource(Resource(id="r1", name="Courier", type=ResourceType.VENDOR))
    await resources_repo.save_resource(
        Resource(id="r1", name="Courier Co", type=ResourceType.VENDOR, description="Next day")
    )

    resources = await resources_repo.list_resources()

    assert len(resources) == 1
    assert resources[0].name == "Courier Co"
    assert resources[0].description == "Next day"


@pytest.mark.anyio
async def test_records_round_trip_with_every_field(store):
    activity = Activity.model_validate(
        {
            "id": "a1",
            "name": "Trading",
            "department": "Markets",
            "priority": "Catastrophic",
            "rto": "1 Hour",
            "rpo": "0 Minutes (Real-time)",
            "mtpd": "4 Hours",
            "resources": ["r1"],
            "impacts": [{"timeframe": "1 Hour", "financialImpact": "Critical"}],
        }
    )
    risk = Risk(
        id="k1",
        description="Exchange outage",
        category=RiskCategory.SUPPLY_CHAIN,
        likelihood=2,
        impact=5,
        related_activity_ids=["a1"],
    )
    await activities_repo.save_activity(activity)
    await risks_repo.save_risk(risk)

    assert await activities_repo.list_activities() == [activity]
    assert await risks_repo.list_risks() == [risk]


@pytest.mark.anyio
async def test_payload_is_stored_with_camel_case_keys(store):
    strategy = RecoveryStrategy(id="s1", activity_id="a1", name="Hot site", is_selected=True)
    await strategies_repo.save_strategy(strategy)

    row = await store.fetch_one("SELECT activity_id, payload FROM strategies WHERE id = ?", ("s1",))

    assert row["activity_id"] == "a1"
    assert '"isSelected": true' in row["payload"]
    assert '"rtoAchievable": "24 Hours"' in row["payload"]


@pytest.mark.anyio
async def test_delete_is_idempotent(store):
    await activities_repo.save_activity(
        Activity(id="a1", name="Payroll", department="HR", priority=ImpactLevel.CRITICAL)
    )

    await activities_repo.delete_activity("a1")
    await activities_repo.delete_activity("a1")
    await activities_repo.delete_activity("never-existed")

    assert await activities_repo.list_activities() == []


@pytest.mark.anyio
async def test_save_strategies_writes_one_batch(store):
    await strategies_repo.save_strategies(
        [
            RecoveryStrategy(id="s1", activity_id="a1", name="One", is_selected=False),
            RecoveryStrategy(id="s2", activity_id="a1", name="Two", is_selected=True),
        ]
    )

    strategies = {s.id: s for s in await strategies_repo.list_strategies()}

    assert set(strategies) == {"s1", "s2"}
    assert strategies["s2"].is_selected


@pytest.mark.anyio
async def test_corrupt_payload_raises(store):
    await store.execute("INSERT INTO risks (id, payload) VALUES (?, ?)", ("bad", '{"likelihood": 9}'))

    with pytest.raises(records.RecordCorruptError) as excinfo:
        await risks_repo.list_risks()

    assert "risks/bad" in str(excinfo.value)


class _FailingDatabase:
    async def execute(self, query, params=None):
        raise aiosqlite.OperationalError("disk I/O error")

    async def execute_batch(self, statements):
        raise aiosqlite.OperationalError("database is locked")


@pytest.mark.anyio
async def test_store_errors_become_write_failures(monkeypatch):
    monkeypatch.setattr(records, "db", _FailingDatabase())

    with pytest.raises(records.WriteFailedError) as excinfo:
        await resources_repo.save_resource(Resource(id="r1", name="Courier", type=ResourceType.VENDOR))
    assert excinfo.value.table == "resources"
    assert excinfo.value.record_id == "r1"
    assert "disk I/O error" in str(excinfo.value)

    with pytest.raises(records.WriteFailedError) as excinfo:
        await strategies_repo.save_strategies(
            [RecoveryStrategy(id="s1", activity_id="a1", name="One")]
        )
    assert excinfo.value.record_id is None


@pytest.mark.anyio
async def test_unopened_store_is_reported(monkeypatch, tmp_path):
    closed = Database()
    closed._get_sqlite_path = lambda: tmp_path / "unused.db"
    monkeypatch.setattr(records, "db", closed)

    with pytest.raises(StoreUnavailableError):
        await resources_repo.list_resources()
    with pytest.raises(StoreUnavailableError):
        await resources_repo.delete_resource("r1")


def test_unknown_table_rejected():
    with pytest.raises(ValueError):
        records.delete_statement("users", "1")
