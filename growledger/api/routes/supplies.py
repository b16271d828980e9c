"""Supply ledger endpoints."""

from fastapi import APIRouter, Depends, status

from growledger.api.dependencies import get_audit, get_ledger
from growledger.application.dto.requests import (
    CreateSupplyRequest,
    EditSupplyRequest,
    RepriceRequest,
    RestockRequest,
)
from growledger.application.dto.responses import (
    AuditRecordResponse,
    ErrorResponse,
    SupplyListResponse,
    SupplyResponse,
    SupplyVerificationResponse,
)
from growledger.config import ledger_context
from growledger.core.entities.supply import StockStatus
from growledger.core.services import AuditTrail, SupplyLedger

router = APIRouter(prefix="/api/supplies", tags=["supplies"])


@router.post(
    "",
    response_model=SupplyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_supply(
    request: CreateSupplyRequest,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Record the first purchase of a supply and lock its unit cost."""
    supply = await ledger.add_supply(
        name=request.name,
        category=request.category,
        unit=request.unit,
        quantity=request.quantity,
        unit_cost=request.unit_cost,
        purchase_total=request.purchase_total,
        low_stock_threshold=request.low_stock_threshold,
        reorder_link=request.reorder_link,
    )
    return SupplyResponse.from_entity(supply)


@router.get("", response_model=SupplyListResponse)
async def list_supplies(
    include_deleted: bool = False,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyListResponse:
    """List supplies with low/empty stock counts."""
    supplies = await ledger.list_supplies(include_deleted=include_deleted)
    active = [s for s in supplies if not s.deleted]
    return SupplyListResponse(
        items=[SupplyResponse.from_entity(s) for s in supplies],
        total=len(supplies),
        low_count=sum(1 for s in active if s.stock_status is StockStatus.LOW),
        empty_count=sum(1 for s in active if s.stock_status is StockStatus.EMPTY),
    )


@router.get("/warnings", response_model=SupplyListResponse)
async def stock_warnings(
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyListResponse:
    """Supplies that are empty or at/below their low-stock threshold."""
    empty = await ledger.empty_stock()
    low = await ledger.low_stock()
    return SupplyListResponse(
        items=[SupplyResponse.from_entity(s) for s in empty + low],
        total=len(empty) + len(low),
        low_count=len(low),
        empty_count=len(empty),
    )


@router.get(
    "/{supply_id}",
    response_model=SupplyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_supply(
    supply_id: str,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Get one supply (soft-deleted supplies included)."""
    return SupplyResponse.from_entity(await ledger.get_supply(supply_id))


@router.patch(
    "/{supply_id}",
    response_model=SupplyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def edit_supply(
    supply_id: str,
    request: EditSupplyRequest,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Edit descriptive fields or recount quantity. Cost is not editable here."""
    with ledger_context(supply_id=supply_id):
        supply = await ledger.edit(supply_id, **request.model_dump(exclude_unset=True))
    return SupplyResponse.from_entity(supply)


@router.post(
    "/{supply_id}/restock",
    response_model=SupplyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def restock_supply(
    supply_id: str,
    request: RestockRequest,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Add purchased stock."""
    with ledger_context(supply_id=supply_id):
        supply = await ledger.restock(supply_id, request.amount, note=request.note)
    return SupplyResponse.from_entity(supply)


@router.post(
    "/{supply_id}/reprice",
    response_model=SupplyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reprice_supply(
    supply_id: str,
    request: RepriceRequest,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Re-lock the unit cost from a new purchase total and quantity."""
    with ledger_context(supply_id=supply_id):
        supply = await ledger.reprice(
            supply_id, request.total_price, request.purchased_quantity
        )
    return SupplyResponse.from_entity(supply)


@router.delete(
    "/{supply_id}",
    response_model=SupplyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_supply(
    supply_id: str,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyResponse:
    """Soft delete; the audit trail is kept."""
    with ledger_context(supply_id=supply_id):
        supply = await ledger.delete(supply_id)
    return SupplyResponse.from_entity(supply)


@router.get(
    "/{supply_id}/events",
    response_model=list[AuditRecordResponse],
)
async def recent_events(
    supply_id: str,
    limit: int | None = None,
    audit: AuditTrail = Depends(get_audit),
) -> list[AuditRecordResponse]:
    """Most recent audit events for a supply, newest first."""
    records = await audit.recent_for_supply(supply_id, limit=limit)
    return [AuditRecordResponse.from_entity(r) for r in records]


@router.get(
    "/{supply_id}/verify",
    response_model=SupplyVerificationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def verify_supply(
    supply_id: str,
    ledger: SupplyLedger = Depends(get_ledger),
) -> SupplyVerificationResponse:
    """Replay the audit trail and compare with the stored quantity."""
    result = await ledger.verify_supply(supply_id)
    return SupplyVerificationResponse(
        supply_id=result.supply_id,
        stored_quantity=result.stored_quantity,
        replayed_quantity=result.replayed_quantity,
        events=result.events,
        consistent=result.consistent,
    )
