import logging
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from database import get_session, unit_of_work
from errors import ApiError, ForbiddenError, InternalError
from models import ManagerComment, SalesPerson
from schemas.auth_schema import Principal
from schemas.comment_schema import CommentCreateSchema, CommentListResponse, CommentReadSchema
from security.oauth2 import require_auth, require_manager
from security.policy import Action, Resource, authorize
from utils import comment_to_dict, get_report_or_404, parse_positive_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Comment"])


def _report_id(raw: str) -> int:
    return parse_positive_id(raw, "INVALID_REPORT_ID", "Invalid report ID")


# -------------------------------
# Comments on a report, newest first
# -------------------------------
@router.get("/{report_id}/comments", response_model=CommentListResponse, status_code=status.HTTP_200_OK)
def list_comments(
    report_id: str,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_auth),
):
    rid = _report_id(report_id)
    try:
        get_report_or_404(db, rid)
        authorize(current_user, Resource.COMMENT, Action.READ)

        rows = db.exec(
            select(ManagerComment, SalesPerson)
            .join(SalesPerson, SalesPerson.id == ManagerComment.manager_id)
            .where(ManagerComment.report_id == rid)
            .order_by(ManagerComment.created_at.desc(), ManagerComment.id.desc())
        ).all()
        return {"data": [comment_to_dict(comment, manager) for comment, manager in rows]}
    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to fetch comments for report %s", rid)
        raise InternalError()


# -------------------------------
# Add a comment (managers only)
# -------------------------------
@router.post("/{report_id}/comments", response_model=CommentReadSchema, status_code=status.HTTP_201_CREATED)
def create_comment(
    report_id: str,
    payload: CommentCreateSchema,
    db: Session = Depends(get_session),
    current_user: Principal = Depends(require_manager),
):
    rid = _report_id(report_id)
    try:
        get_report_or_404(db, rid)
        authorize(current_user, Resource.COMMENT, Action.CREATE)

        # the token may predate a demotion or deactivation
        manager = db.get(SalesPerson, current_user.id)
        if not manager or not manager.is_manager or not manager.is_active:
            raise ForbiddenError()

        comment = ManagerComment(report_id=rid, manager_id=manager.id, comment=payload.comment)
        with unit_of_work(db):
            db.add(comment)

        db.refresh(comment)
        logger.info("Comment %s added to report %s by manager %s", comment.id, rid, manager.id)
        return comment_to_dict(comment, manager)

    except ApiError:
        raise
    except Exception:
        logger.exception("Failed to create comment on report %s", rid)
        db.rollback()
        raise InternalError()
