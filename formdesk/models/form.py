from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
import enum
from formdesk.db.base import Base
from formdesk.utils.helpers import get_utc_now, generate_public_slug

class QuestionType(str, enum.Enum):
    TEXT = "text"
    SINGLE_CHOICE = "single-choice"

class Theme(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"
    BLUE = "blue"
    GREEN = "green"

class Form(Base):
    __tablename__ = "forms"
    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # [{"id", "text", "type", "options", "required", "order"}, ...] in display order
    questions = Column(JSON, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    public_slug = Column(String, nullable=False, unique=True, default=generate_public_slug)

    # Settings
    allow_multiple_responses = Column(Boolean, nullable=False, default=False)
    require_email = Column(Boolean, nullable=False, default=False)
    theme = Column(String, nullable=False, default=Theme.LIGHT.value)

    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    creator = relationship("User", back_populates="forms")
