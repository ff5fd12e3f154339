"""
api/routers/simulation.py
-------------------------
What-if simulations and the apply / undo transaction.
"""

from fastapi import APIRouter, Depends, Response

from api.dependencies import (
    echo_request_seq,
    get_apply_undo_service,
    get_current_user_id,
    get_simulation_service,
)
from api.schemas import (
    ApplySimulationRequest,
    CancelSimulationRequest,
    CombinedSimulationRequest,
    SimulationResultResponse,
    VirtualItemRequest,
)
from services.simulation_service import SimulationService
from services.undo_service import ApplyUndoService

router = APIRouter()


@router.post(
    "/cancel",
    response_model=SimulationResultResponse,
    dependencies=[Depends(echo_request_seq)],
)
def simulate_cancel(
    body: CancelSimulationRequest,
    user_id: int = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service),
):
    """Project spend if the given subscriptions were cancelled. Unknown IDs are ignored."""
    return service.simulate_cancel(user_id, body.subscriptionIds).to_dict()


@router.post(
    "/add",
    response_model=SimulationResultResponse,
    dependencies=[Depends(echo_request_seq)],
)
def simulate_add(
    body: VirtualItemRequest,
    user_id: int = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service),
):
    """Project spend if one virtual subscription were added."""
    return service.simulate_add(user_id, body.to_item()).to_dict()


@router.post(
    "/combined",
    response_model=SimulationResultResponse,
    dependencies=[Depends(echo_request_seq)],
)
def simulate_combined(
    body: CombinedSimulationRequest,
    user_id: int = Depends(get_current_user_id),
    service: SimulationService = Depends(get_simulation_service),
):
    """Cancellations and additions evaluated together."""
    items = [item.to_item() for item in body.addItems]
    return service.simulate_combined(user_id, body.cancelSubscriptionIds, items).to_dict()


@router.post("/apply", status_code=204)
def apply_simulation(
    body: ApplySimulationRequest,
    user_id: int = Depends(get_current_user_id),
    service: ApplyUndoService = Depends(get_apply_undo_service),
):
    """Cancel for real. IDs that can't be cancelled are skipped."""
    service.apply(user_id, body.action, body.subscriptionIds)
    return Response(status_code=204)


@router.post("/undo", status_code=204)
def undo_simulation(
    user_id: int = Depends(get_current_user_id),
    service: ApplyUndoService = Depends(get_apply_undo_service),
):
    """Revert the latest apply; 409 UNDO_UNAVAILABLE when nothing can be undone."""
    service.undo(user_id)
    return Response(status_code=204)
