"""
API and record schemas for the EcoWaste backend

Field names are snake_case in Python and camelCase on the wire
(wasteName, creditsEarned, ...). Records correspond to the in-memory
stores in database.py:

- UserAccount -> users
- WasteEntry -> entries
"""

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictFloat, StrictInt
from pydantic.alias_generators import to_camel

from waste_types import WasteCategory


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Prediction(ApiModel):
    label: str = Field(..., description="Classifier label (free text)")
    confidence: float = Field(..., ge=0, le=1, description="Model confidence 0-1")


# ---- records ----

class UserAccount(ApiModel):
    id: int
    username: str = Field(..., description="Display name")
    email: str
    total_credits: float = Field(0, ge=0, description="Running credit total")


class WasteEntry(ApiModel):
    id: int
    user_id: int
    entry_type: Literal["manual", "ai"] = "manual"
    waste_name: str
    waste_type: str
    quantity: Optional[float] = Field(None, gt=0, description="Weight in kg, weighable categories only")
    place: str
    notes: Optional[str] = None
    credits_earned: float = Field(0, ge=0)
    created_at: datetime
    ai_confidence: Optional[float] = Field(None, ge=0, le=1)
    ai_raw_predictions: Optional[List[Prediction]] = None


# ---- requests ----

class EntryCreate(ApiModel):
    waste_name: Optional[str] = None
    waste_type: Optional[str] = None
    # Numbers or numeric strings; booleans are refused here and
    # credit_calculator.validate_quantity decides the rest
    quantity: Optional[Union[StrictFloat, StrictInt, str]] = None
    place: Optional[str] = None
    notes: Optional[str] = None
    entry_type: Literal["manual", "ai"] = "manual"
    ai_confidence: Optional[float] = Field(None, ge=0, le=1)
    ai_raw_predictions: Optional[List[Prediction]] = None
    user_id: Optional[int] = None


class LoginRequest(ApiModel):
    email: str
    password: Optional[str] = None


class SignupRequest(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)


class AITestRequest(ApiModel):
    image_data: Optional[str] = None
    detected_type: Optional[str] = None
    confidence: Optional[float] = None


# ---- responses ----

class ErrorResponse(ApiModel):
    success: bool = False
    error: str


class EntryCreateResponse(ApiModel):
    success: bool = True
    entry: WasteEntry
    credits_earned: float
    new_total_credits: float


class EntryListResponse(ApiModel):
    success: bool = True
    entries: List[WasteEntry]
    total: int


class UserStats(ApiModel):
    total_items_recycled: int
    total_credits_earned: float
    average_credits_per_item: float


class UserProfile(UserAccount):
    stats: UserStats


class UserProfileResponse(ApiModel):
    success: bool = True
    user: UserProfile


class AuthResponse(ApiModel):
    success: bool = True
    user: UserAccount
    token: str


class WasteTypesResponse(ApiModel):
    success: bool = True
    waste_types: List[WasteCategory]


class PlacesResponse(ApiModel):
    success: bool = True
    places: List[str]


class DetectionResponse(ApiModel):
    success: bool = True
    detected_type: str
    label: str
    confidence: float
    raw_predictions: List[Prediction]
    suggested_name: str
    suggested_quantity: Optional[float] = None
    waste_type: WasteCategory
