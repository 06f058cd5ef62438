from typing import Any, Optional
from pydantic import AliasChoices, Field

from schemas.base import BaseSchema

class CallerResponse(BaseSchema):
    user_id: str

class UserSettingsUpdate(BaseSchema):
    # Validated by the binding service so that every malformed value maps to invalid_input
    default_elderly_id: Optional[Any] = Field(
        None, validation_alias=AliasChoices("default_elderly_id", "defaultElderlyId")
    )

class UserSettingsResponse(BaseSchema):
    user_id: str
    default_elderly_id: Optional[int] = None
    updated_at: Optional[str] = None
