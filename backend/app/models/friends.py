"""
Friends Schemas
===============
Profiles as seen by other users, friend requests, and the relationship
status shown next to each search result.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

FriendStatus = Literal["none", "pending_sent", "pending_received", "friends"]
RequestStatus = Literal["pending", "accepted", "rejected"]


class Profile(BaseModel):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSearchResult(Profile):
    friend_status: FriendStatus = "none"


class FriendRequest(BaseModel):
    id: str
    requester_id: str
    receiver_id: str
    status: RequestStatus = "pending"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    requester: Optional[Profile] = None


class FriendRequestCreate(BaseModel):
    receiver_id: str = Field(..., min_length=1)
