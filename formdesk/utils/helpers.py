from datetime import datetime, timezone
from typing import Dict, Any, Optional
import re
import secrets
import string
import time

SLUG_ALPHABET = string.ascii_lowercase + string.digits

def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)

def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime to ISO format with timezone"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        # SQLite hands back naive values for timezone-aware columns
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()

def generate_public_slug() -> str:
    """
    Generate the opaque identifier used in a form's public link

    Returns:
        String like "form-1718000000000-k3j9x0a2b"
    """
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(SLUG_ALPHABET) for _ in range(9))
    return f"form-{millis}-{suffix}"

def paginate_query(query, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy query

    Args:
        query: Query to paginate, already filtered and ordered
        page: Page number (1-based)
        page_size: Number of items per page

    Returns:
        Dict containing the page of ORM objects and pagination metadata
    """
    page = max(page, 1)
    page_size = max(page_size, 1)

    total_items = query.count()
    total_pages = (total_items + page_size - 1) // page_size
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": items,
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "page_size": page_size,
            "total_items": total_items
        }
    }

def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename by removing invalid characters

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Remove invalid characters
    filename = re.sub(r'[<>:"/\\|?*]', '', filename)
    # Remove control characters
    filename = "".join(char for char in filename if ord(char) >= 32)
    # Header values must stay ASCII
    filename = filename.encode("ascii", "ignore").decode("ascii")
    return filename.strip() or "form"
