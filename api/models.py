"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.

Lead payloads come from the chatbot widget with many optional intake fields
(see domain.tables.LEAD_COLUMNS); only the common ones are declared here and
the rest are accepted as extra fields and passed through to the lead row.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

Scalar = Union[str, int, float, None]


# ============================================================================
# Lead Models
# ============================================================================

class LeadPayload(BaseModel):
    """Lead fields submitted by the chatbot. Unknown fields are kept."""
    lead_first_name: Optional[str] = None
    lead_last_name: Optional[str] = None
    lead_email: Optional[str] = None
    lead_phone: Scalar = None
    lead_state: Optional[str] = None
    lead_score: Scalar = None
    lead_tier: Optional[str] = None
    utm_source: Optional[str] = None

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {
                "lead_first_name": "Jane",
                "lead_last_name": "Doe",
                "lead_email": "jane@example.com",
                "lead_phone": "555-0100",
                "lead_state": "TX",
                "lead_age": "34",
                "employment_type": "Business Owner",
                "income_range": "$8,000+",
                "has_partner": "Married",
                "home_status": "Own my home",
                "nicotine_use": "No",
                "utm_source": "facebook"
            }
        }

    def to_record(self) -> Dict[str, Any]:
        """Declared and extra fields as a flat dict."""
        return self.model_dump()


class ScoreResponse(BaseModel):
    """Score and product recommendations for a lead profile."""
    score: int
    recommendations: List[str]
    breakdown: Dict[str, int]

    class Config:
        json_schema_extra = {
            "example": {
                "score": 110,
                "recommendations": ["Term Life"],
                "breakdown": {
                    "age": 20,
                    "monthly_income": 25,
                    "employment_type": 20,
                    "relationship_status": 15,
                    "number_of_kids": 5,
                    "housing_status": 10,
                    "tobacco_use": 5,
                    "health_status": 5,
                    "financial_discipline": 5
                }
            }
        }


class LeadSubmitResponse(BaseModel):
    """Response after a lead row was recorded."""
    success: bool
    lead_score: str
    lead_tier: Optional[str] = None
    recommendations: List[str] = []
    message: str


class ReferralRequest(BaseModel):
    """Referral sent by someone who is not the decision maker."""
    lead_first_name: Optional[str] = None
    lead_last_name: Optional[str] = None
    lead_state: Optional[str] = None
    lead_state_other: Optional[str] = None
    primary_focus: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Scalar = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "lead_first_name": "Sam",
                "lead_state": "LA",
                "owner_email": "owner@example.com",
                "owner_phone": "555-0199"
            }
        }


# ============================================================================
# Booking Models
# ============================================================================

class BookingRequest(LeadPayload):
    """Booking request: lead fields plus the requested slot."""
    appointment_date: str = Field(
        ...,
        min_length=1,
        description="ISO-8601 slot start; compared as an exact string"
    )
    appointment_formatted: Optional[str] = Field(
        None,
        description='Display form in the lead\'s time zone, e.g. "Thu, Dec 26 at 4:00 PM"'
    )
    session_type: Optional[str] = None
    session_duration: Scalar = None

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {
                "appointment_date": "2025-12-26T21:00:00.000Z",
                "appointment_formatted": "Thu, Dec 26 at 4:00 PM",
                "session_type": "Discovery Call",
                "session_duration": 30,
                "lead_first_name": "Jane",
                "lead_last_name": "Doe",
                "lead_email": "jane@example.com",
                "lead_phone": "555-0100",
                "lead_score": 85,
                "lead_tier": "A"
            }
        }


class BookingResponse(BaseModel):
    """Response for a confirmed booking."""
    success: bool
    message: str
    requested_time: str
    display_time: str
    availability_checked: bool = True


# ============================================================================
# Contact Models
# ============================================================================

class ContactRequest(BaseModel):
    """Website contact form submission."""
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    message: Optional[str] = None
    coverages: Optional[str] = Field(None, description="Comma-separated coverage interests")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Doe",
                "email": "jane@example.com",
                "phone": "555-0100",
                "message": "Looking for coverage for my family.",
                "coverages": "Term Life, Whole Life"
            }
        }


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Error body for rejected requests."""
    success: bool = False
    error: str
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "error": "TIME_SLOT_TAKEN",
                "message": "Sorry, this time slot was just booked by someone else. Please select a different time."
            }
        }


def error_detail(error: str, message: str) -> Dict[str, Any]:
    """HTTPException detail body for a rejected request."""
    return ErrorResponse(error=error, message=message).model_dump()
