"""
Authentication schemas for the storage service.

The dashboard's auth service issues tokens; this service only needs to know
who is asking and with which role.
"""

from typing import Optional

from pydantic import BaseModel


class Requester(BaseModel):
    """The authenticated identity behind a request."""

    id: str
    role: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True
