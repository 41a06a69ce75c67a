from fastapi import APIRouter, Depends

from app.core.security import verify_secret_token
from app.models.api_models import RejectProposalRequest
from app.api.schedule import booking_service

router = APIRouter(dependencies=[Depends(verify_secret_token)])

@router.post("/proposals/{proposal_id}/approve")
async def approve_proposal(proposal_id: str):
    event = await booking_service.approve_proposal(proposal_id)
    return {"success": True, "eventId": event.get("id")}

@router.post("/proposals/{proposal_id}/reject")
async def reject_proposal(proposal_id: str, req: RejectProposalRequest):
    await booking_service.reject_proposal(proposal_id, req.reason)
    return {"success": True}
