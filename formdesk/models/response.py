from sqlalchemy import Column, Integer, String, DateTime, JSON, Index
from formdesk.db.base import Base
from formdesk.utils.helpers import get_utc_now

class FormResponse(Base):
    __tablename__ = "form_responses"

    id = Column(Integer, primary_key=True)
    # Not a foreign key: responses are removed by delete_form_db, not by the database
    form_id = Column(Integer, nullable=False)
    # [{"question_id", "question_text", "question_type", "answer"}, ...] snapshot at submission time
    answers = Column(JSON, nullable=False)
    submitter_email = Column(String, nullable=True)
    submitter_name = Column(String(100), nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)

    __table_args__ = (
        Index("ix_form_responses_form_submitted", "form_id", "submitted_at"),
        Index("ix_form_responses_submitter_email", "submitter_email"),
    )
