from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from formdesk.db.session import get_db
from formdesk.core.config.settings import get_settings
from formdesk.core.security.auth import get_current_user
from formdesk.schemas.form import FormCreateRequest, FormUpdateRequest
from formdesk.crud.forms import (
    create_form_db, get_owned_form_db, get_form_by_slug_db, list_forms_db,
    update_form_db, delete_form_db, count_responses_db, form_to_dict
)

router = APIRouter(prefix="/forms", tags=["forms"])

logger = logging.getLogger("formdesk.forms")

@router.post("", status_code=status.HTTP_201_CREATED)
def create_form(
    form_data: FormCreateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new form"""
    form = create_form_db(form_data, current_user["user"].id, db)
    return {
        "message": "Form created successfully",
        "form": form_to_dict(form, response_count=0)
    }

@router.get("")
def list_forms(
    page: int = 1,
    limit: Optional[int] = None,
    search: str = "",
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all forms of the authenticated admin"""
    page_size = limit or get_settings().FORMS_PAGE_SIZE
    return list_forms_db(current_user["user"].id, db, page=page, page_size=page_size, search=search)

@router.get("/public/{public_slug}")
def get_public_form(public_slug: str, db: Session = Depends(get_db)):
    """Get an active form by its public link, no authentication required"""
    form = get_form_by_slug_db(public_slug, db)
    if not form:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Form not found or inactive"
        )
    return {"form": form_to_dict(form, public=True)}

@router.get("/{form_id}")
def get_form(
    form_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a form by ID"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    counts = count_responses_db([form.id], db)
    return {"form": form_to_dict(form, counts[form.id])}

@router.put("/{form_id}")
def update_form(
    form_id: int,
    form_data: FormUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a form; its public link never changes"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    form = update_form_db(form, form_data, db)
    counts = count_responses_db([form.id], db)
    return {
        "message": "Form updated successfully",
        "form": form_to_dict(form, counts[form.id])
    }

@router.delete("/{form_id}")
def delete_form(
    form_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a form and every response to it"""
    form = get_owned_form_db(form_id, current_user["user"].id, db)
    deleted_responses = delete_form_db(form, db)
    return {
        "message": "Form deleted successfully",
        "deleted_responses": deleted_responses
    }
