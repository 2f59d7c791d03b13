"""
privacy_relay/models/entitlement.py

Entitlement record persisted in the hosted record store.

A record is written once per completed checkout and never mutated.
Wire names are camelCase to match the store's column names.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntitlementRecord(BaseModel):
    """
    Pro entitlement for one email.

    Columns:
    - email (str): natural key, stored exactly as the payment gateway sent it
    - isPro (bool): true once a completed checkout was recorded
    - upgradedAt (timestamptz): time of the triggering event; older rows may lack it
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    email: str
    is_pro: bool = Field(default=True, alias="isPro")
    upgraded_at: Optional[datetime] = Field(default=None, alias="upgradedAt")

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EntitlementRecord":
        return cls.model_validate(
            {
                "email": row.get("email") or "",
                "isPro": row.get("isPro") is True,
                "upgradedAt": row.get("upgradedAt"),
            }
        )
