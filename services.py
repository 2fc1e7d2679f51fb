import logging
import secrets
from collections import Counter
from datetime import datetime, timezone
from typing import Optional, Tuple

from credit_calculator import compute_credits, format_credits, validate_submission
from database import Database
from errors import AuthenticationError, ConflictError, NotFoundError
from schemas import EntryCreate, UserAccount, UserProfile, UserStats, WasteEntry
from waste_types import WASTE_TYPES

logger = logging.getLogger(__name__)


def require_user(db: Database, user_id: int) -> UserAccount:
    user = db.users.get(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def submit_entry(db: Database, payload: EntryCreate, default_user_id: int = 1) -> Tuple[WasteEntry, float]:
    """
    Validate and store a waste entry, then credit its owner.

    Returns the stored entry and the owner's new credit total.
    """
    checked = validate_submission(payload)
    user_id = payload.user_id if payload.user_id is not None else default_user_id
    require_user(db, user_id)

    credits_earned = compute_credits(checked.category, checked.quantity)
    entry = db.entries.add(
        user_id=user_id,
        entry_type=payload.entry_type,
        waste_name=checked.waste_name,
        waste_type=checked.category.value,
        place=checked.place,
        credits_earned=credits_earned,
        quantity=checked.quantity,
        notes=payload.notes or None,
        ai_confidence=payload.ai_confidence,
        ai_raw_predictions=payload.ai_raw_predictions,
    )
    new_total = db.users.add_credits(user_id, credits_earned)
    logger.info(
        "Entry %s (%s, %s) earned %s credits for user %s",
        entry.id, entry.entry_type, entry.waste_type, format_credits(credits_earned), user_id,
    )
    return entry, new_total


def user_profile(db: Database, user_id: int) -> UserProfile:
    user = require_user(db, user_id)
    entries = db.entries.list_for_user(user_id)
    total_items = len(entries)
    total_credits = sum(e.credits_earned for e in entries)
    stats = UserStats(
        total_items_recycled=total_items,
        total_credits_earned=total_credits,
        average_credits_per_item=total_credits / total_items if total_items > 0 else 0,
    )
    return UserProfile(**user.model_dump(), stats=stats)


def signup(db: Database, name: str, email: str) -> UserAccount:
    # Passwords are accepted by the API but never stored or checked
    if db.users.get_by_email(email) is not None:
        raise ConflictError("User already exists")
    username = name.strip().lower().replace(" ", "_")
    user = db.users.create(username=username, email=email)
    logger.info("Signed up user %s (%s)", user.id, user.username)
    return user


def login(db: Database, email: str) -> UserAccount:
    user = db.users.get_by_email(email)
    if user is None:
        logger.info("Login failed for unknown email")
        raise AuthenticationError("Invalid credentials")
    return user


def issue_token() -> str:
    return secrets.token_urlsafe(32)


def ai_stats(db: Database, classifier_name: str) -> dict:
    ai_entries = [e for e in db.entries.all() if e.entry_type == "ai"]
    confidences = [e.ai_confidence for e in ai_entries if e.ai_confidence is not None]
    counts = Counter(e.waste_type for e in ai_entries)
    most_detected: Optional[str] = counts.most_common(1)[0][0] if counts else None

    return {
        "success": True,
        "aiDetectionStats": {
            "totalDetections": len(ai_entries),
            "averageConfidence": round(100 * sum(confidences) / len(confidences), 1) if confidences else 0,
            "mostDetectedType": most_detected,
            "categoriesSupported": len(WASTE_TYPES),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        },
        "modelInfo": {
            "name": "Waste Classification Model",
            "classifier": classifier_name,
            "status": "Mock Mode" if classifier_name == "mock" else "Heuristic Mode",
        },
    }
