# bookswap/schemas/exchange_request.py
from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from bookswap.sa.models import SharingMode, RequestStatus

# Request input is one model per request type, so a give-away draft cannot
# carry a loan duration and only a swap draft names an offered listing.

class DraftBase(BaseModel):
    listing_id: int
    message: Optional[str] = None

    model_config = ConfigDict(extra='forbid')

class GiveAwayDraft(DraftBase):
    request_type: Literal["give_away"] = "give_away"

class LendDraft(DraftBase):
    request_type: Literal["lend"] = "lend"
    requested_duration_days: int

class SwapDraft(DraftBase):
    request_type: Literal["swap"] = "swap"
    offered_listing_id: int

RequestDraft = Annotated[
    Union[GiveAwayDraft, LendDraft, SwapDraft],
    Field(discriminator='request_type')
]

class ExchangeRequest(BaseModel):
    id: int
    listing_id: int
    requester_id: int
    owner_id: int
    request_type: SharingMode
    status: RequestStatus
    message: Optional[str] = None
    offered_listing_id: Optional[int] = None
    requested_duration_days: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class RequestCounts(BaseModel):
    pending_received: int
    updated_sent: int
