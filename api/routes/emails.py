"""
Email API Routes

Endpoints for listing, entering, reviewing and sending support email, and
for triggering reply generation either immediately or through the queue.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Path, status

from api.models.emails import (
    EmailCreateRequest,
    EmailResponse,
    EmailSyncResponse,
    EmailUpdateRequest,
    EnqueueResponse,
)
from api.services.email_service import EmailService, get_email_service
from triage.analyzers.responder import ResponseGenerationError
from triage.models import EmailStatus, Sentiment, StatusTransitionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emails", tags=["Emails"])


def _not_found(email_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Email with ID {email_id} not found"
    )


@router.get(
    "/",
    response_model=List[EmailResponse],
    summary="List emails"
)
async def list_emails(
    sentiment: Optional[Sentiment] = Query(None, description="Filter by sentiment"),
    urgency: Optional[str] = Query(None, pattern="^(urgent|normal)$", description="Filter by urgency"),
    email_status: Optional[EmailStatus] = Query(None, alias="status", description="Filter by status"),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Retrieve emails, newest first, with optional filtering.

    Args:
        sentiment: positive, neutral or negative
        urgency: urgent or normal
        email_status: pending, processed or sent
    """
    try:
        return await email_service.list_emails(
            sentiment=sentiment.value if sentiment else None,
            urgency=urgency,
            status=email_status.value if email_status else None,
        )
    except Exception as e:
        logger.error(f"Error retrieving emails: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch emails"
        )


@router.post(
    "/",
    response_model=EmailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enter a new email"
)
async def create_email(
    request: EmailCreateRequest,
    email_service: EmailService = Depends(get_email_service)
):
    """
    Classify and store a new email, then queue it for a drafted reply.
    """
    try:
        return await email_service.create_email(request)
    except ValueError as e:
        logger.warning(f"Rejected email from {request.sender}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid email data: {str(e)}"
        )


@router.post(
    "/sync",
    response_model=EmailSyncResponse,
    summary="Load demo emails"
)
async def sync_emails(
    email_service: EmailService = Depends(get_email_service)
):
    """Load the demo emails through classification and the processing queue."""
    try:
        emails = await email_service.sync_sample_emails()
    except Exception as e:
        logger.error(f"Error syncing emails: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sync emails"
        )
    return EmailSyncResponse(message=f"Synced {len(emails)} emails", emails=emails)


@router.get(
    "/{email_id}",
    response_model=EmailResponse,
    summary="Get a single email"
)
async def get_email(
    email_id: str = Path(..., description="Email identifier"),
    email_service: EmailService = Depends(get_email_service)
):
    email = await email_service.get_email(email_id)
    if not email:
        raise _not_found(email_id)
    return email


@router.patch(
    "/{email_id}",
    response_model=EmailResponse,
    summary="Edit a drafted reply or advance the status"
)
async def update_email(
    request: EmailUpdateRequest,
    email_id: str = Path(..., description="Email identifier"),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Apply human edits from the review screen.

    Invalid status changes are answered with 409 Conflict.
    """
    email = await email_service.update_email(email_id, request)
    if not email:
        raise _not_found(email_id)
    return email


@router.post(
    "/{email_id}/generate-response",
    response_model=EmailResponse,
    summary="Generate a reply now"
)
async def generate_response(
    email_id: str = Path(..., description="Email identifier"),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Draft a reply synchronously, bypassing the queue.

    Generation failures are answered with 502 Bad Gateway.
    """
    try:
        email = await email_service.generate_response(email_id)
    except (ResponseGenerationError, StatusTransitionError):
        raise
    except Exception as e:
        logger.error(f"Error generating response for {email_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate response"
        )
    if not email:
        raise _not_found(email_id)
    return email


@router.post(
    "/{email_id}/send",
    response_model=EmailResponse,
    summary="Send the drafted reply"
)
async def send_email(
    email_id: str = Path(..., description="Email identifier"),
    email_service: EmailService = Depends(get_email_service)
):
    try:
        email = await email_service.send_email(email_id)
    except StatusTransitionError:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not email:
        raise _not_found(email_id)
    return email


@router.post(
    "/{email_id}/enqueue",
    response_model=EnqueueResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue an email for reply generation"
)
async def enqueue_email(
    email_id: str = Path(..., description="Email identifier"),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Add the email to the processing queue with its urgency-derived priority.

    Emails that already have a reply are skipped when their turn comes.
    """
    result = await email_service.enqueue_email(email_id)
    if not result:
        raise _not_found(email_id)
    return result
