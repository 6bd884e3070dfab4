import json
import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

import db_models
from core import exceptions
from core.formats import (ResourceMeta, get_output_format, render_collection,
                          render_item)
from core.pagination import paginate
from core.redis_config import (conferences_cache_key, get_cache,
                               invalidate_conferences_cache, set_cache)
from db_config import get_db
from dependencies import ROLE_ADMIN, require_role
from schemas.conference import (CONFERENCE_READ_FIELDS, ConferencePatch,
                                ConferenceRead, ConferenceWrite)

CONFERENCES_PER_PAGE = 30

CONFERENCE_RESOURCE = ResourceMeta(
    short_name="conference",
    columns=CONFERENCE_READ_FIELDS,
    items_per_page=CONFERENCES_PER_PAGE,
)

router = APIRouter(prefix="/api/conferences", tags=["conferences"])
logger = logging.getLogger(__name__)


def serialize_conference(conference: db_models.Conference) -> dict:
    return ConferenceRead.model_validate(conference).model_dump(mode="json")


def get_conference_or_404(
    db_session: Session, conference_id: int
) -> db_models.Conference:
    conference = (
        db_session.query(db_models.Conference)
        .filter(db_models.Conference.id == conference_id)
        .first()
    )
    if not conference:
        logger.warning(f"Conference not found: conference_id={conference_id}")
        raise exceptions.ConferenceNotFoundError(conference_id=conference_id)
    return conference


# --- Endpoints ---


@router.get("")
def list_conferences(
    request: Request,
    page: int = Query(default=1, ge=1),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """List conferences with Redis caching"""
    logger.info(f"Listing conferences page={page}")

    cache_key = conferences_cache_key(page)
    cached_page = get_cache(cache_key)

    if cached_page:
        payload = json.loads(cached_page)
    else:
        query = db_session.query(db_models.Conference).order_by(
            db_models.Conference.id
        )
        conferences, total = paginate(query, page, CONFERENCES_PER_PAGE)
        payload = {
            "items": [serialize_conference(c) for c in conferences],
            "total": total,
        }
        set_cache(cache_key, json.dumps(payload))

    return render_collection(
        request,
        output_format,
        CONFERENCE_RESOURCE,
        payload["items"],
        page=page,
        total=payload["total"],
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_conference(
    request: Request,
    conference_data: ConferenceWrite,
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Create a conference (admin only)"""
    logger.info(
        f"Creating conference city={conference_data.city} year={conference_data.year} "
        f"for user_id={current_user.id}"
    )

    conference = db_models.Conference(**conference_data.model_dump())

    db_session.add(conference)
    db_session.commit()
    db_session.refresh(conference)

    invalidate_conferences_cache()

    logger.info(f"Successfully created conference_id={conference.id}")
    return render_item(
        request,
        output_format,
        CONFERENCE_RESOURCE,
        serialize_conference(conference),
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{conference_id}")
def get_conference(
    request: Request,
    conference_id: int,
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    conference = get_conference_or_404(db_session, conference_id)
    return render_item(
        request, output_format, CONFERENCE_RESOURCE, serialize_conference(conference)
    )


@router.put("/{conference_id}")
def replace_conference(
    request: Request,
    conference_id: int,
    conference_data: ConferenceWrite,
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Replace a conference (admin only)"""
    logger.info(f"Replacing conference_id={conference_id} for user_id={current_user.id}")

    conference = get_conference_or_404(db_session, conference_id)
    for field, value in conference_data.model_dump().items():
        setattr(conference, field, value)

    db_session.commit()
    db_session.refresh(conference)
    invalidate_conferences_cache()

    return render_item(
        request, output_format, CONFERENCE_RESOURCE, serialize_conference(conference)
    )


@router.patch("/{conference_id}")
def update_conference(
    request: Request,
    conference_id: int,
    conference_data: ConferencePatch,
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
    output_format: str = Depends(get_output_format),
    db_session: Session = Depends(get_db),
):
    """Update only the fields that were sent (admin only)"""
    update_data = conference_data.model_dump(exclude_unset=True)
    logger.info(
        f"Updating conference_id={conference_id} fields={sorted(update_data)} "
        f"for user_id={current_user.id}"
    )

    conference = get_conference_or_404(db_session, conference_id)
    for field, value in update_data.items():
        setattr(conference, field, value)

    db_session.commit()
    db_session.refresh(conference)
    invalidate_conferences_cache()

    return render_item(
        request, output_format, CONFERENCE_RESOURCE, serialize_conference(conference)
    )


@router.delete("/{conference_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conference(
    conference_id: int,
    db_session: Session = Depends(get_db),
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
):
    """Delete a conference and its comments (admin only)"""
    logger.info(f"Deleting conference_id={conference_id} for user_id={current_user.id}")

    conference = get_conference_or_404(db_session, conference_id)
    db_session.delete(conference)
    db_session.commit()
    invalidate_conferences_cache()

    logger.info(f"Conference deleted successfully: conference_id={conference_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
