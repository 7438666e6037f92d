from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response
from functools import partial
from sqlalchemy.orm import Session
from typing import Optional
import logging

from formdesk.db.session import get_db
from formdesk.core.config.settings import get_settings
from formdesk.core.security.auth import get_current_user
from formdesk.schemas.response import ResponseSubmitRequest
from formdesk.crud.forms import get_form_db, get_owned_form_db
from formdesk.crud.responses import (
    find_response_by_identity_db, get_form_responses_db, get_response_db,
    list_responses_db, response_to_dict, save_response_db
)
from formdesk.services.submission_validator import Rejected, RejectionKind, validate_submission
from formdesk.services.summary import summarize
from formdesk.services.csv_export import export_filename, export_responses_csv

router = APIRouter(prefix="/responses", tags=["responses"])

logger = logging.getLogger("formdesk.responses")

def rejection_to_http(rejection: Rejected) -> HTTPException:
    status_code = (
        status.HTTP_404_NOT_FOUND
        if rejection.kind == RejectionKind.FORM_UNAVAILABLE
        else status.HTTP_400_BAD_REQUEST
    )
    return HTTPException(
        status_code=status_code,
        detail=rejection.model_dump(mode="json", exclude={"accepted"}, exclude_none=True)
    )

@router.post("", status_code=status.HTTP_201_CREATED)
def submit_response(
    payload: ResponseSubmitRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Submit a response to a form, no authentication required"""
    origin_address = request.client.host if request.client else None
    form = get_form_db(payload.form_id, db)

    result = validate_submission(
        form,
        payload.answers,
        submitter_email=payload.submitter_email,
        origin_address=origin_address,
        find_prior_response=partial(find_response_by_identity_db, payload.form_id, db),
    )
    if isinstance(result, Rejected):
        logger.info(f"Submission to form {payload.form_id} rejected: {result.kind.value}")
        raise rejection_to_http(result)

    response_id = save_response_db(
        form.id,
        result.answers,
        db,
        submitter_email=payload.submitter_email,
        submitter_name=payload.submitter_name,
        ip_address=origin_address,
        user_agent=request.headers.get("user-agent"),
    )
    return {
        "message": "Response submitted successfully",
        "response_id": response_id
    }

@router.get("/form/{form_id}")
def list_form_responses(
    form_id: int,
    page: int = 1,
    limit: Optional[int] = None,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the responses to one of the admin's forms"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    page_size = limit or get_settings().RESPONSES_PAGE_SIZE
    return list_responses_db(form.id, db, page=page, page_size=page_size)

@router.get("/form/{form_id}/summary")
def get_form_summary(
    form_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get per-question statistics for a form"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    responses = get_form_responses_db(form.id, db)
    return {"summary": summarize(form, responses).model_dump(mode="json")}

@router.get("/form/{form_id}/export")
def export_form_responses(
    form_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download the responses to a form as CSV"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    responses = get_form_responses_db(form.id, db)
    if not responses:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No responses to export"
        )

    logger.info(f"Exporting {len(responses)} responses for form {form.id}")
    return Response(
        content=export_responses_csv(form, responses),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(form)}"'
        }
    )

@router.get("/{response_id}")
def get_response(
    response_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a single response to one of the admin's forms"""
    response = get_response_db(response_id, db)
    if not response:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Response not found"
        )

    form = get_form_db(response.form_id, db)
    if not form:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Response not found"
        )
    if form.creator_id != current_user["user"].id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )

    data = response_to_dict(response)
    data["form"] = {"id": form.id, "title": form.title}
    return {"response": data}
