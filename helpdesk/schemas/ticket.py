from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TicketCreate(BaseModel):
    # Unknown keys such as tenant_id or user_id are dropped here; the
    # repository stamps both from the request context.
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    user_id: int
    tenant_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
