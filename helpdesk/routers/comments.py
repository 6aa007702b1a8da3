"""
Comments Router

Comments belong to a ticket; only their author may edit or delete them.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from helpdesk.core.auth import CurrentUser, UserPrincipal, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.comment import CommentCreate, CommentPublic, CommentUpdate
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.models.enums import AuthorType
from helpdesk.models.orm.comment import Comment
from helpdesk.repositories.comment import CommentRepository
from helpdesk.repositories.ticket import TicketRepository
from helpdesk.services.comment_format import render_body_html

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"], dependencies=[Depends(admit_request)])


def _ensure_author(comment: Comment, user: UserPrincipal, action: str) -> None:
    if comment.author_type != AuthorType.USER or comment.author_id != user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own comments",
        )


@router.get("", response_model=CursorPage[CommentPublic])
async def list_comments(
    current_user: CurrentUser,
    db: DbSession,
    ticket_id: int | None = Query(None, description="Filter by ticket"),
    is_private: bool | None = Query(None, description="Filter by visibility"),
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[CommentPublic]:
    """List comments of the caller's organization."""
    page = await CommentRepository(db).list_for_organization(
        current_user.organization_id,
        ticket_id=ticket_id,
        is_private=is_private,
        cursor=cursor,
        limit=limit,
    )
    return CursorPage[CommentPublic].from_page(page, CommentPublic)


@router.get("/{comment_id}", response_model=CommentPublic)
async def get_comment(comment_id: int, current_user: CurrentUser, db: DbSession) -> CommentPublic:
    comment = ensure_owned(await CommentRepository(db).get_by_id(comment_id), current_user, "Comment")
    return CommentPublic.model_validate(comment)


@router.post("", response_model=CommentPublic, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> CommentPublic:
    """
    Comment on a ticket as the calling user.

    Raises:
        HTTPException: 404/403 if the ticket is missing or in another organization
    """
    ensure_owned(await TicketRepository(db).get_by_id(comment_data.ticket_id), current_user, "Ticket")

    comment = Comment(
        ticket_id=comment_data.ticket_id,
        body=comment_data.body,
        body_html=render_body_html(comment_data.body),
        is_private=comment_data.is_private,
        author_type=AuthorType.USER.value,
        author_id=current_user.user_id,
        organization_id=current_user.organization_id,
    )
    comment = await CommentRepository(db).create(comment)
    logger.info(
        "Created comment",
        extra={"ticket_id": comment.ticket_id, "comment_id": comment.id},
    )
    return CommentPublic.model_validate(comment)


@router.patch("/{comment_id}", response_model=CommentPublic)
async def update_comment(
    comment_id: int,
    update_data: CommentUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> CommentPublic:
    repo = CommentRepository(db)
    comment = ensure_owned(await repo.get_by_id(comment_id), current_user, "Comment")
    _ensure_author(comment, current_user, "update")

    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    if "body" in changes:
        changes["body_html"] = render_body_html(changes["body"])

    comment = await repo.update(comment, changes)
    return CommentPublic.model_validate(comment)


@router.delete("/{comment_id}", response_model=SuccessResponse)
async def delete_comment(comment_id: int, current_user: CurrentUser, db: DbSession) -> SuccessResponse:
    repo = CommentRepository(db)
    comment = ensure_owned(await repo.get_by_id(comment_id), current_user, "Comment")
    _ensure_author(comment, current_user, "delete")
    await repo.delete(comment)
    return SuccessResponse()
