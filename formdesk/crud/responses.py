from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
from fastapi import HTTPException
import logging

from formdesk.models.response import FormResponse
from formdesk.schemas.response import AnswerSnapshot
from formdesk.utils.helpers import format_datetime, get_utc_now, paginate_query

logger = logging.getLogger("formdesk.crud.responses")

def response_to_dict(response: FormResponse) -> Dict[str, Any]:
    return {
        "id": response.id,
        "form_id": response.form_id,
        "answers": response.answers,
        "submitter_email": response.submitter_email,
        "submitter_name": response.submitter_name,
        "ip_address": response.ip_address,
        "user_agent": response.user_agent,
        "submitted_at": format_datetime(response.submitted_at),
    }

def get_form_responses_db(form_id: int, db: Session) -> List[FormResponse]:
    """All responses to a form, newest first"""
    return (
        db.query(FormResponse)
        .filter(FormResponse.form_id == form_id)
        .order_by(FormResponse.submitted_at.desc(), FormResponse.id.desc())
        .all()
    )

def list_responses_db(form_id: int, db: Session, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
    """
    Page through the responses to a form, newest first

    Parameters:
    - form_id: Form whose responses are listed
    - db: Database session
    - page: 1-based page number
    - page_size: Responses per page

    Returns:
    - Dictionary with the page of responses and pagination metadata
    """
    query = (
        db.query(FormResponse)
        .filter(FormResponse.form_id == form_id)
        .order_by(FormResponse.submitted_at.desc(), FormResponse.id.desc())
    )
    result = paginate_query(query, page, page_size)
    result["items"] = [response_to_dict(response) for response in result["items"]]
    return result

def get_response_db(response_id: int, db: Session) -> Optional[FormResponse]:
    return db.query(FormResponse).filter(FormResponse.id == response_id).first()

def find_response_by_identity_db(
    form_id: int,
    db: Session,
    email: Optional[str] = None,
    origin_address: Optional[str] = None,
) -> Optional[FormResponse]:
    """
    Find an earlier response to a form from the same submitter

    Parameters:
    - form_id: Form being submitted to
    - db: Database session
    - email: Submitter email; takes precedence when given
    - origin_address: Client address, used when there is no email

    Returns:
    - The first matching response, or None
    """
    query = db.query(FormResponse).filter(FormResponse.form_id == form_id)
    if email:
        query = query.filter(FormResponse.submitter_email == email)
    elif origin_address:
        query = query.filter(FormResponse.ip_address == origin_address)
    else:
        return None
    return query.first()

def save_response_db(
    form_id: int,
    answers: List[AnswerSnapshot],
    db: Session,
    submitter_email: Optional[str] = None,
    submitter_name: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> int:
    """
    Persist an accepted submission

    Returns:
    - ID of the new response
    """
    try:
        new_response = FormResponse(
            form_id=form_id,
            answers=[answer.model_dump(mode="json") for answer in answers],
            submitter_email=submitter_email,
            submitter_name=submitter_name,
            ip_address=ip_address,
            user_agent=user_agent,
            submitted_at=get_utc_now(),
        )
        db.add(new_response)
        db.commit()
        db.refresh(new_response)

        logger.info(f"Response {new_response.id} stored for form {form_id}")
        return new_response.id
    except Exception as e:
        db.rollback()
        logger.error(f"Error storing response for form {form_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error storing form response: {str(e)}")
