import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from app.api.deps import get_current_admin
from app.db.database import get_db
from app.models.ticket import Ticket
from app.schemas.market import TicketCreate, TicketResponse, TicketStatusUpdate
from app.schemas.base import BaseResponse, MessageResponse
from app.services.sequences import next_sequence

logger = logging.getLogger(__name__)

# Mounted twice: public submission under /support-ticket, management under /tickets
public_router = APIRouter()
router = APIRouter()


@public_router.post("", response_model=BaseResponse[TicketResponse], status_code=status.HTTP_201_CREATED)
async def submit_ticket(ticket_data: TicketCreate, db: AsyncSession = Depends(get_db)):
    """Submit a support ticket (public)"""
    ticket = Ticket(id=await next_sequence(db, "tickets"), status="open", **ticket_data.dict())
    db.add(ticket)
    await db.commit()
    await db.refresh(ticket)
    logger.info(f"Support ticket {ticket.id} opened: {ticket.subject}")
    return BaseResponse.success_response(data=ticket, message="Your support ticket has been submitted")


@router.get("", response_model=BaseResponse[List[TicketResponse]])
async def get_tickets(
    ticket_status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    query = select(Ticket)
    if ticket_status:
        query = query.where(Ticket.status == ticket_status)
    result = await db.execute(query.order_by(Ticket.id.desc()))
    return BaseResponse.success_response(data=result.scalars().all(), message="Tickets retrieved successfully")


@router.put("/{ticket_id}/status", response_model=BaseResponse[TicketResponse])
async def set_ticket_status(
    ticket_id: int,
    status_update: TicketStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    ticket = await db.get(Ticket, ticket_id)
    if not ticket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    ticket.status = status_update.status
    await db.commit()
    await db.refresh(ticket)
    return BaseResponse.success_response(data=ticket, message="Ticket updated")


@router.delete("/{ticket_id}", response_model=MessageResponse)
async def delete_ticket(
    ticket_id: int,
    db: AsyncSession = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    ticket = await db.get(Ticket, ticket_id)
    if not ticket:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    await db.delete(ticket)
    await db.commit()
    return MessageResponse.success_message("Ticket deleted successfully")
