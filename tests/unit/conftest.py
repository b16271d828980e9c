"""Fixtures for unit tests: an in-memory document store behind the core interfaces.

Nothing here touches SQLite. The fake runner commits a callback's buffered
writes only when it returns, which is enough to exercise rollback on error.
"""

import copy
from typing import Any

import pytest

from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.entities.base import DocumentModel
from growledger.core.entities.clean_queue import CleanQueueEntry
from growledger.core.entities.recipe import Recipe
from growledger.core.entities.run import Run
from growledger.core.entities.supply import Supply
from growledger.core.interfaces import (
    Collection,
    DocumentRef,
    IAuditStore,
    ICleanQueueStore,
    IRecipeStore,
    IRunStore,
    ISupplyStore,
    ITransaction,
    ITransactionRunner,
)
from growledger.core.services import (
    AuditTrail,
    CleanQueueService,
    RecipeScaler,
    ReconciliationEngine,
    SupplyLedger,
)


class InMemoryTransaction(ITransaction):
    def __init__(self, docs: dict[DocumentRef, dict[str, Any]]):
        self._docs = docs
        self.writes: dict[DocumentRef, dict[str, Any]] = {}

    async def get(self, ref: DocumentRef) -> dict[str, Any] | None:
        if ref in self.writes:
            return copy.deepcopy(self.writes[ref])
        data = self._docs.get(ref)
        return copy.deepcopy(data) if data is not None else None

    def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        self.writes[ref] = copy.deepcopy(data)


class InMemoryRunner(ITransactionRunner):
    def __init__(self) -> None:
        self.docs: dict[DocumentRef, dict[str, Any]] = {}
        self.operations: list[str] = []

    async def run(self, fn, operation: str = "transaction"):
        tx = InMemoryTransaction(self.docs)
        result = await fn(tx)
        self.docs.update(tx.writes)
        self.operations.append(operation)
        return result

    def put(self, collection: Collection, entity: DocumentModel) -> None:
        self.docs[DocumentRef(collection, entity.id)] = entity.to_document()  # type: ignore[arg-type]

    def load(self, collection: Collection, doc_id: str, model: type[DocumentModel]):
        data = self.docs.get(DocumentRef(collection, doc_id))
        return model.from_document(doc_id, data) if data is not None else None

    def all(self, collection: Collection, model: type[DocumentModel]) -> list:
        return [
            model.from_document(ref.doc_id, data)
            for ref, data in self.docs.items()
            if ref.collection is collection
        ]


class InMemorySupplyStore(ISupplyStore):
    def __init__(self, runner: InMemoryRunner):
        self._runner = runner

    async def get(self, supply_id: str) -> Supply | None:
        return self._runner.load(Collection.SUPPLIES, supply_id, Supply)

    async def list_supplies(
        self, include_deleted: bool = False, limit: int | None = None, offset: int = 0
    ) -> list[Supply]:
        supplies = self._runner.all(Collection.SUPPLIES, Supply)
        if not include_deleted:
            supplies = [s for s in supplies if not s.deleted]
        supplies.sort(key=lambda s: s.name.lower())
        end = None if limit is None else offset + limit
        return supplies[offset:end]


class InMemoryAuditStore(IAuditStore):
    def __init__(self, runner: InMemoryRunner):
        self._runner = runner

    def _ordered(self) -> list[AuditRecord]:
        return sorted(
            self._runner.all(Collection.AUDIT_RECORDS, AuditRecord),
            key=lambda r: r.timestamp,
        )

    async def list_for_supply(
        self, supply_id: str, limit: int | None = None
    ) -> list[AuditRecord]:
        records = [r for r in self._ordered() if r.supply_id == supply_id]
        return records if limit is None else records[:limit]

    async def list_records(
        self,
        action: AuditAction | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[AuditRecord]:
        records = [r for r in self._ordered() if action is None or r.action is action]
        return records[offset : offset + limit]


class InMemoryRunStore(IRunStore):
    def __init__(self, runner: InMemoryRunner):
        self._runner = runner

    async def create(self, run: Run) -> Run:
        if run.id is None:
            run = run.model_copy(update={"id": f"run-{len(self._runner.docs)}"})
        self._runner.put(Collection.RUNS, run)
        return run

    async def get(self, run_id: str) -> Run | None:
        return self._runner.load(Collection.RUNS, run_id, Run)

    async def list_runs(self, limit: int = 2000, offset: int = 0) -> list[Run]:
        return self._runner.all(Collection.RUNS, Run)[offset : offset + limit]


class InMemoryRecipeStore(IRecipeStore):
    def __init__(self, runner: InMemoryRunner):
        self._runner = runner

    async def save(self, recipe: Recipe) -> Recipe:
        if recipe.id is None:
            recipe = recipe.model_copy(update={"id": f"recipe-{len(self._runner.docs)}"})
        self._runner.put(Collection.RECIPES, recipe)
        return recipe

    async def get(self, recipe_id: str) -> Recipe | None:
        return self._runner.load(Collection.RECIPES, recipe_id, Recipe)

    async def list_recipes(self, limit: int = 500, offset: int = 0) -> list[Recipe]:
        return self._runner.all(Collection.RECIPES, Recipe)[offset : offset + limit]

    async def delete(self, recipe_id: str) -> bool:
        return self._runner.docs.pop(DocumentRef(Collection.RECIPES, recipe_id), None) is not None


class InMemoryCleanQueueStore(ICleanQueueStore):
    def __init__(self, runner: InMemoryRunner):
        self._runner = runner

    async def get(self, supply_id: str) -> CleanQueueEntry | None:
        return self._runner.load(Collection.CLEAN_QUEUE, supply_id, CleanQueueEntry)

    async def list_entries(self, pending_only: bool = True) -> list[CleanQueueEntry]:
        entries = self._runner.all(Collection.CLEAN_QUEUE, CleanQueueEntry)
        if pending_only:
            entries = [e for e in entries if e.pending > 0]
        return sorted(entries, key=lambda e: e.name.lower())


@pytest.fixture
def runner() -> InMemoryRunner:
    return InMemoryRunner()


@pytest.fixture
def supply_store(runner: InMemoryRunner) -> InMemorySupplyStore:
    return InMemorySupplyStore(runner)


@pytest.fixture
def audit_store(runner: InMemoryRunner) -> InMemoryAuditStore:
    return InMemoryAuditStore(runner)


@pytest.fixture
def run_store(runner: InMemoryRunner) -> InMemoryRunStore:
    return InMemoryRunStore(runner)


@pytest.fixture
def recipe_store(runner: InMemoryRunner) -> InMemoryRecipeStore:
    return InMemoryRecipeStore(runner)


@pytest.fixture
def queue_store(runner: InMemoryRunner) -> InMemoryCleanQueueStore:
    return InMemoryCleanQueueStore(runner)


@pytest.fixture
def audit_trail(audit_store: InMemoryAuditStore) -> AuditTrail:
    return AuditTrail(audit_store, recent_limit=5)


@pytest.fixture
def ledger(runner, supply_store, audit_trail) -> SupplyLedger:
    return SupplyLedger(runner, supply_store, audit_trail)


@pytest.fixture
def clean_queue(runner, ledger, audit_trail, run_store, queue_store) -> CleanQueueService:
    return CleanQueueService(runner, ledger, audit_trail, run_store, queue_store)


@pytest.fixture
def reconciliation(ledger, recipe_store) -> ReconciliationEngine:
    return ReconciliationEngine(ledger, recipe_store, RecipeScaler())
