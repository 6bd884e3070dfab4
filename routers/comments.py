import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

import db_models
from core import exceptions
from core.formats import (ResourceMeta, get_output_format, render_collection,
                          render_item)
from core.iri import parse_item_iri
from core.pagination import paginate
from core.rate_limit_config import limiter
from db_config import get_db
from dependencies import ROLE_ADMIN, ROLE_USER, require_role
from schemas.comment import (COMMENT_READ_FIELDS, CommentPatch, CommentRead,
                             CommentWrite)

COMMENTS_PER_PAGE = 2

COMMENT_RESOURCE = ResourceMeta(
    short_name="commentaire",
    columns=COMMENT_READ_FIELDS,
    items_per_page=COMMENTS_PER_PAGE,
    relations=("conference",),
)

router = APIRouter(prefix="/api/commentaires", tags=["commentaires"])
logger = logging.getLogger(__name__)


def serialize_comment(comment: db_models.Comment) -> dict:
    """Comment as exposed to clients: read group only, derived fields computed now"""
    return CommentRead.model_validate(comment).model_dump(mode="json")


def get_comment_or_404(db_session: Session, comment_id: int) -> db_models.Comment:
    comment = (
        db_session.query(db_models.Comment)
        .filter(db_models.Comment.id == comment_id)
        .first()
    )
    if not comment:
        logger.warning(f"Comment not found: comment_id={comment_id}")
        raise exceptions.CommentNotFoundError(comment_id=comment_id)
    return comment


def resolve_conference(
    db_session: Session, iri: Optional[str]
) -> Optional[db_models.Conference]:
    """Turn a conference IRI into the conference it names"""
    if iri is None:
        return None

    conference_id = parse_item_iri("conference", iri)
    conference = (
        db_session.query(db_models.Conference)
        .filter(db_models.Conference.id == conference_id)
        .first()
    )
    if not conference:
        logger.warning(f"Conference IRI does not resolve: {iri}")
        raise exceptions.InvalidIriError(iri)
    return conference


# --- Endpoints ---


@router.get("")
def list_comments(
    request: Request,
    page: int = Query(default=1, ge=1),
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """List comments, two per page (admin only)"""
    logger.info(f"Listing comments page={page} for user_id={current_user.id}")

    query = db_session.query(db_models.Comment).order_by(db_models.Comment.id)
    comments, total = paginate(query, page, COMMENTS_PER_PAGE)

    logger.info(f"Found {len(comments)} comments on page={page} (total={total})")
    return render_collection(
        request,
        output_format,
        COMMENT_RESOURCE,
        [serialize_comment(c) for c in comments],
        page=page,
        total=total,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/hour")
def create_comment(
    request: Request,
    comment_data: CommentWrite,
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Leave a comment in the guestbook (open to everyone)"""
    logger.info(f"Creating comment by author={comment_data.author}")

    conference = resolve_conference(db_session, comment_data.conference)

    comment = db_models.Comment(
        author=comment_data.author,
        text=comment_data.text,
        email=comment_data.email,
        note=comment_data.note,
        conference=conference,
    )

    db_session.add(comment)
    db_session.commit()
    db_session.refresh(comment)

    logger.info(f"Successfully created comment_id={comment.id}")
    return render_item(
        request,
        output_format,
        COMMENT_RESOURCE,
        serialize_comment(comment),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{comment_id}")
def get_comment(
    request: Request,
    comment_id: int,
    current_user: db_models.User = Depends(require_role(ROLE_USER)),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Read a single comment (authenticated users)"""
    logger.info(f"Retrieving comment_id={comment_id} for user_id={current_user.id}")

    comment = get_comment_or_404(db_session, comment_id)

    return render_item(request, output_format, COMMENT_RESOURCE, serialize_comment(comment))


@router.put("/{comment_id}")
def replace_comment(
    request: Request,
    comment_id: int,
    comment_data: CommentWrite,
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Replace every writable field of a comment"""
    logger.info(f"Replacing comment_id={comment_id}")

    comment = get_comment_or_404(db_session, comment_id)
    conference = resolve_conference(db_session, comment_data.conference)

    comment.author = comment_data.author  # type: ignore
    comment.text = comment_data.text  # type: ignore
    comment.email = comment_data.email  # type: ignore
    comment.note = comment_data.note  # type: ignore
    comment.conference = conference  # type: ignore

    db_session.commit()
    db_session.refresh(comment)

    logger.info(f"Comment replaced successfully: comment_id={comment_id}")
    return render_item(request, output_format, COMMENT_RESOURCE, serialize_comment(comment))


@router.patch("/{comment_id}")
def update_comment(
    request: Request,
    comment_id: int,
    comment_data: CommentPatch,
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Update only the fields that were sent"""
    update_data = comment_data.model_dump(exclude_unset=True)
    logger.info(f"Updating comment_id={comment_id} fields={sorted(update_data)}")

    comment = get_comment_or_404(db_session, comment_id)

    if "conference" in update_data:
        comment.conference = resolve_conference(  # type: ignore
            db_session, update_data.pop("conference")
        )

    for field, value in update_data.items():
        setattr(comment, field, value)

    db_session.commit()
    db_session.refresh(comment)

    logger.info(f"Comment updated successfully: comment_id={comment_id}")
    return render_item(request, output_format, COMMENT_RESOURCE, serialize_comment(comment))


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    db_session: Session = Depends(get_db),
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
):
    """Delete a comment (admin only)"""
    logger.info(f"Deleting comment_id={comment_id} for user_id={current_user.id}")

    comment = get_comment_or_404(db_session, comment_id)
    db_session.delete(comment)
    db_session.commit()

    logger.info(f"Comment deleted successfully: comment_id={comment_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
