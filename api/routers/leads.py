"""
Leads API Endpoints.

Endpoints for scoring lead profiles and recording lead submissions.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_lead_intake_service
from api.errors import store_unavailable
from api.models import LeadPayload, LeadSubmitResponse, ReferralRequest, ScoreResponse
from domain.lead_profile import LeadProfile
from repositories.errors import StoreUnavailableError
from services.lead_intake_service import LeadIntakeService
from services.lead_scoring_service import score_lead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/score",
    response_model=ScoreResponse,
    summary="Score Lead Profile",
    description="Compute a lead score and product recommendations. Nothing is stored."
)
def score_profile(request: LeadPayload):
    """
    Score a lead profile.

    Any profile field may be missing; missing fields contribute no points.
    Accepts both the intake form names (`lead_age`, `home_status`,
    `nicotine_use`) and the chatbot names (`age`, `monthlyIncome`, ...).

    **Example request:**
    ```json
    {
      "age": 32,
      "monthlyIncome": "$8,500",
      "employmentType": "Business Owner",
      "relationshipStatus": "Married",
      "numberOfKids": 2,
      "housingStatus": "Own my home",
      "financialDiscipline": 6,
      "healthStatus": "Excellent",
      "tobaccoUse": "No"
    }
    ```

    **Response:**
    ```json
    {"score": 110, "recommendations": ["Term Life"], "breakdown": {"age": 20, ...}}
    ```
    """
    result = score_lead(LeadProfile.from_mapping(request.to_record()))
    return ScoreResponse(
        score=result.score,
        recommendations=list(result.recommendations),
        breakdown=dict(result.breakdown),
    )


@router.post(
    "/sheets-submit",
    response_model=LeadSubmitResponse,
    summary="Submit Lead",
    description="Append a lead row. The lead is scored when no lead_score is submitted."
)
def submit_lead(
    request: LeadPayload,
    intake: LeadIntakeService = Depends(get_lead_intake_service),
):
    """
    Record a chatbot lead submission.

    **Process:**
    1. Scores the profile (the submitted `lead_score` wins if present)
    2. Builds a row in the leads table column order
    3. Appends it to the leads table

    Returns 503 with `Retry-After` if the store is unavailable.
    """
    try:
        result = intake.submit_lead(request.to_record())
        return LeadSubmitResponse(
            success=True,
            lead_score=result.lead_score,
            lead_tier=result.lead_tier,
            recommendations=list(result.score_result.recommendations),
            message="Lead added successfully",
        )

    except StoreUnavailableError as e:
        raise store_unavailable(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Lead submission failed")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to record lead: {str(e)}"
        )


@router.post(
    "/owner-referral",
    response_model=LeadSubmitResponse,
    summary="Submit Owner Referral",
    description="Record a referral from someone who is not the decision maker."
)
def submit_owner_referral(
    request: ReferralRequest,
    intake: LeadIntakeService = Depends(get_lead_intake_service),
):
    """
    Record an owner referral.

    The row is marked `decision_role = "Referral"` and the owner's contact
    details are stored in `notes`.
    """
    try:
        intake.submit_referral(request.model_dump())
        return LeadSubmitResponse(
            success=True,
            lead_score="",
            message="Referral recorded",
        )

    except StoreUnavailableError as e:
        raise store_unavailable(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Referral submission failed")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to record referral: {str(e)}"
        )
