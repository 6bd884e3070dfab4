"""
Admin dashboard: a landing page, a static side menu and one list screen
per entity. Everything here is read-only; writes go through the API.
"""

import logging
from typing import Iterator

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

import db_models
from core.pagination import paginate
from core.templating import templates
from db_config import get_db
from dependencies import ROLE_ADMIN, require_role
from routers.comments import serialize_comment
from routers.conferences import serialize_conference
from schemas.admin import CrudColumn, MenuItem

DASHBOARD_TITLE = "Guestbookapi"
WELCOME_TITLE = "Bienvenu sur le tableau de bord des conférences"
WELCOME_DESCRIPTION = (
    "Vous allez pouvoir gérer les différents lieux de conférences "
    "ainsi que leurs commentaires"
)

ADMIN_ITEMS_PER_PAGE = 20

CONFERENCE_COLUMNS = [
    CrudColumn(name="id", label="ID"),
    CrudColumn(name="city", label="Ville"),
    CrudColumn(name="year", label="Année"),
    CrudColumn(name="is_international", label="Internationale"),
]

COMMENT_COLUMNS = [
    CrudColumn(name="id", label="ID"),
    CrudColumn(name="author", label="Auteur"),
    CrudColumn(name="shorttext", label="Texte"),
    CrudColumn(name="email", label="Email"),
    CrudColumn(name="note", label="Note"),
    CrudColumn(name="conference", label="Conférence"),
    CrudColumn(name="age", label="Âge"),
]

router = APIRouter(prefix="/admin", tags=["admin"], include_in_schema=False)
logger = logging.getLogger(__name__)


def configure_menu_items() -> Iterator[MenuItem]:
    yield MenuItem(label="Dashboard", icon="fa fa-home", url="/admin")
    yield MenuItem(
        label="Conférences", icon="fas fa-map-marker-alt", url="/admin/conferences"
    )
    yield MenuItem(label="Commentaires", icon="fas fa-comments", url="/admin/comments")


def _layout_context() -> dict:
    return {
        "dashboard_title": DASHBOARD_TITLE,
        "menu_items": list(configure_menu_items()),
    }


@router.get("")
def dashboard(
    request: Request,
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
):
    """Landing page of the admin dashboard"""
    logger.info(f"Rendering admin dashboard for user_id={current_user.id}")
    return templates.TemplateResponse(
        request,
        "admin/dashboard.html",
        {
            **_layout_context(),
            "title": WELCOME_TITLE,
            "description": WELCOME_DESCRIPTION,
        },
    )


@router.get("/conferences")
def conference_index(
    request: Request,
    page: int = Query(default=1, ge=1),
    db_session: Session = Depends(get_db),
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
):
    logger.info(f"Rendering conference list page={page} for user_id={current_user.id}")

    query = db_session.query(db_models.Conference).order_by(db_models.Conference.id)
    conferences, total = paginate(query, page, ADMIN_ITEMS_PER_PAGE)

    return templates.TemplateResponse(
        request,
        "admin/crud_index.html",
        {
            **_layout_context(),
            "entity_label": "Conférences",
            "columns": CONFERENCE_COLUMNS,
            "rows": [serialize_conference(c) for c in conferences],
            "page": page,
            "total": total,
            "items_per_page": ADMIN_ITEMS_PER_PAGE,
        },
    )


@router.get("/comments")
def comment_index(
    request: Request,
    page: int = Query(default=1, ge=1),
    db_session: Session = Depends(get_db),
    current_user: db_models.User = Depends(require_role(ROLE_ADMIN)),
):
    logger.info(f"Rendering comment list page={page} for user_id={current_user.id}")

    query = db_session.query(db_models.Comment).order_by(
        db_models.Comment.created_at.desc()
    )
    comments, total = paginate(query, page, ADMIN_ITEMS_PER_PAGE)

    return templates.TemplateResponse(
        request,
        "admin/crud_index.html",
        {
            **_layout_context(),
            "entity_label": "Commentaires",
            "columns": COMMENT_COLUMNS,
            "rows": [serialize_comment(c) for c in comments],
            "page": page,
            "total": total,
            "items_per_page": ADMIN_ITEMS_PER_PAGE,
        },
    )
