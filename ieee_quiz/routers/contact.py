import logging
import uuid

from fastapi import APIRouter, Depends

from ieee_quiz.dependencies import get_clock, get_record_store
from ieee_quiz.errors import InvalidRequest
from ieee_quiz.models import ContactCreate, ContactMessage, MessageResponse, dump
from ieee_quiz.store import CONTACT_PREFIX, RecordStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=MessageResponse)
def submit_contact(
    data: ContactCreate,
    records: RecordStore = Depends(get_record_store),
    clock=Depends(get_clock),
):
    if not (data.name.strip() and data.email.strip() and data.message.strip()):
        raise InvalidRequest("Name, email, and message are required")

    msg = ContactMessage(id=str(uuid.uuid4()), created_at=clock(), **data.model_dump())
    records.set(f"{CONTACT_PREFIX}{msg.id}", dump(msg))
    logger.info("Stored contact message %s", msg.id)

    return MessageResponse(message="Contact form submitted successfully")
