"""
User Context
============
The authenticated caller, resolved once per request and handed to the
services explicitly.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class UserContext(BaseModel):
    user_id: Optional[str] = None
    username: Optional[str] = None
    full_name: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)
