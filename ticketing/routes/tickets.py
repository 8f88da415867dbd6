from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_lookup
from ..errors import TicketingError, TicketNotFound
from ..logging_config import get_logger
from ..models import TicketDetail
from ..services.ticket_service import TicketLookup

logger = get_logger("ticketing.routes.tickets")

router = APIRouter(prefix="/api/tickets", tags=["tickets"])


@router.get("/{ticket_id}", response_model=TicketDetail)
def get_ticket(ticket_id: str, lookup: TicketLookup = Depends(get_lookup)):
    logger.info("Fetching ticket", extra={"ticket_id": ticket_id})
    try:
        return lookup.get_ticket(ticket_id)
    except TicketNotFound as e:
        logger.info("Ticket not found", extra={"ticket_id": ticket_id})
        return JSONResponse({"msg": e.message}, status_code=404)
    except TicketingError as e:
        logger.error("Error fetching ticket", extra={"ticket_id": ticket_id, "error": str(e)})
        return JSONResponse({"msg": "Server error", "error": e.code.value}, status_code=500)
