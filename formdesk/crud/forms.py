from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, Any, List, Optional
from fastapi import HTTPException
import logging
import uuid

from formdesk.models.form import Form
from formdesk.models.response import FormResponse
from formdesk.schemas.form import FormCreateRequest, FormUpdateRequest, QuestionCreate
from formdesk.utils.helpers import format_datetime, paginate_query

logger = logging.getLogger("formdesk.crud.forms")

def build_questions(questions: List[QuestionCreate], existing: Optional[List[dict]] = None) -> List[dict]:
    """
    Turn validated question input into the stored question list

    Parameters:
    - questions: Questions in display order
    - existing: Currently stored questions, whose ids may be reused

    Returns:
    - List of question dicts with ids and 1-based order
    """
    known_ids = {question["id"] for question in existing or []}
    used_ids = set()
    result = []
    for index, question in enumerate(questions):
        question_id = question.id
        if question_id not in known_ids or question_id in used_ids:
            question_id = uuid.uuid4().hex
        used_ids.add(question_id)
        result.append({
            "id": question_id,
            "text": question.text,
            "type": question.type.value,
            "options": list(question.options),
            "required": question.required,
            "order": index + 1,
        })
    return result

def form_to_dict(form: Form, response_count: Optional[int] = None, public: bool = False) -> Dict[str, Any]:
    data = {
        "id": form.id,
        "title": form.title,
        "description": form.description,
        "questions": form.questions,
        "is_active": form.is_active,
        "public_slug": form.public_slug,
        "settings": {
            "allow_multiple_responses": form.allow_multiple_responses,
            "require_email": form.require_email,
            "theme": form.theme,
        },
    }
    if public:
        return data

    data.update({
        "creator_id": form.creator_id,
        "created_at": format_datetime(form.created_at),
        "updated_at": format_datetime(form.updated_at),
    })
    if response_count is not None:
        data["response_count"] = response_count
    return data

def count_responses_db(form_ids: List[int], db: Session) -> Dict[int, int]:
    """Count stored responses per form id"""
    if not form_ids:
        return {}
    rows = (
        db.query(FormResponse.form_id, func.count(FormResponse.id))
        .filter(FormResponse.form_id.in_(form_ids))
        .group_by(FormResponse.form_id)
        .all()
    )
    counts = {form_id: 0 for form_id in form_ids}
    counts.update({form_id: count for form_id, count in rows})
    return counts

def create_form_db(form_data: FormCreateRequest, creator_id: int, db: Session) -> Form:
    """
    Create a new form in the database

    Parameters:
    - form_data: FormCreateRequest object
    - creator_id: ID of the admin creating the form
    - db: Database session

    Returns:
    - The stored Form, with its public slug assigned
    """
    try:
        new_form = Form(
            title=form_data.title,
            description=form_data.description,
            creator_id=creator_id,
            questions=build_questions(form_data.questions),
            is_active=True,
            allow_multiple_responses=form_data.settings.allow_multiple_responses,
            require_email=form_data.settings.require_email,
            theme=form_data.settings.theme.value,
        )

        db.add(new_form)
        db.commit()
        db.refresh(new_form)

        logger.info(f"Form {new_form.id} created by user {creator_id}")
        return new_form
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating form: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating form: {str(e)}")

def get_form_db(form_id: int, db: Session) -> Optional[Form]:
    """Load a form by ID, or None"""
    return db.query(Form).filter(Form.id == form_id).first()

def get_owned_form_db(form_id: int, creator_id: int, db: Session) -> Form:
    """
    Load a form that belongs to the given admin

    Raises 404 when the form does not exist or belongs to someone else.
    """
    form = db.query(Form).filter(
        Form.id == form_id,
        Form.creator_id == creator_id
    ).first()
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form

def get_form_by_slug_db(public_slug: str, db: Session) -> Optional[Form]:
    """Load an active form by its public slug, or None"""
    return db.query(Form).filter(
        Form.public_slug == public_slug,
        Form.is_active.is_(True)
    ).first()

def list_forms_db(creator_id: int, db: Session, page: int = 1, page_size: int = 10, search: str = "") -> Dict[str, Any]:
    """
    List an admin's forms, newest first

    Parameters:
    - creator_id: Owner of the forms
    - db: Database session
    - page: 1-based page number
    - page_size: Forms per page
    - search: Case-insensitive title filter

    Returns:
    - Dictionary with the page of forms and pagination metadata
    """
    query = db.query(Form).filter(Form.creator_id == creator_id)
    if search:
        query = query.filter(Form.title.ilike(f"%{search}%"))
    query = query.order_by(Form.created_at.desc(), Form.id.desc())

    result = paginate_query(query, page, page_size)
    counts = count_responses_db([form.id for form in result["items"]], db)
    result["items"] = [form_to_dict(form, counts[form.id]) for form in result["items"]]
    return result

def update_form_db(form: Form, form_data: FormUpdateRequest, db: Session) -> Form:
    """
    Apply a partial update to a form

    The public slug is never touched. Settings are merged into the current
    ones. A new question list replaces the old one; questions sent back with
    their id keep it.
    """
    try:
        if form_data.title is not None:
            form.title = form_data.title
        if form_data.description is not None:
            form.description = form_data.description
        if form_data.is_active is not None:
            form.is_active = form_data.is_active
        if form_data.settings is not None:
            settings = form_data.settings
            if settings.allow_multiple_responses is not None:
                form.allow_multiple_responses = settings.allow_multiple_responses
            if settings.require_email is not None:
                form.require_email = settings.require_email
            if settings.theme is not None:
                form.theme = settings.theme.value
        if form_data.questions is not None:
            form.questions = build_questions(form_data.questions, existing=form.questions)

        db.commit()
        db.refresh(form)

        logger.info(f"Form {form.id} updated")
        return form
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating form {form.id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating form: {str(e)}")

def delete_form_db(form: Form, db: Session) -> int:
    """
    Delete a form together with its responses

    Returns:
    - Number of responses removed
    """
    form_id = form.id
    try:
        deleted = (
            db.query(FormResponse)
            .filter(FormResponse.form_id == form_id)
            .delete(synchronize_session=False)
        )
        db.delete(form)
        db.commit()

        logger.info(f"Form {form_id} deleted with {deleted} responses")
        return deleted
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting form {form_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting form: {str(e)}")
