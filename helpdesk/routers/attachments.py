"""
Attachments Router

Upload, download and delete attachment files, and link them to tickets
and comments of the same organization.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy.exc import IntegrityError

from helpdesk.config import get_settings
from helpdesk.core.auth import CurrentUser, UserPrincipal, admit_request, ensure_owned
from helpdesk.core.database import DbSession
from helpdesk.models.contracts.attachment import AttachmentPublic
from helpdesk.models.contracts.common import SuccessResponse
from helpdesk.models.contracts.pagination import CursorPage
from helpdesk.models.orm.attachment import Attachment
from helpdesk.repositories.attachment import AttachmentRepository
from helpdesk.repositories.comment import CommentRepository
from helpdesk.repositories.ticket import TicketRepository
from helpdesk.services.file_storage import FileStorageService, get_file_storage_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/attachments",
    tags=["attachments"],
    dependencies=[Depends(admit_request)],
)

Storage = Annotated[FileStorageService, Depends(get_file_storage_service)]


async def _get_attachment(
    repo: AttachmentRepository, attachment_id: int, user: UserPrincipal
) -> Attachment:
    return ensure_owned(await repo.get_by_id(attachment_id), user, "Attachment")


@router.get("", response_model=CursorPage[AttachmentPublic])
async def list_attachments(
    current_user: CurrentUser,
    db: DbSession,
    cursor: str | None = Query(None, description="Cursor from a previous page"),
    limit: int | None = Query(None, description="Maximum results per page"),
) -> CursorPage[AttachmentPublic]:
    """List attachment metadata of the caller's organization."""
    page = await AttachmentRepository(db).list_for_organization(
        current_user.organization_id, cursor=cursor, limit=limit
    )
    return CursorPage[AttachmentPublic].from_page(page, AttachmentPublic)


@router.get("/{attachment_id}", response_model=None)
async def download_attachment(
    attachment_id: int,
    current_user: CurrentUser,
    db: DbSession,
    storage: Storage,
) -> FileResponse | RedirectResponse:
    """
    Download an attachment's file.

    Local storage streams the file; S3 storage redirects to a presigned URL.

    Raises:
        HTTPException: 404 if the attachment or its file is missing
    """
    attachment = await _get_attachment(AttachmentRepository(db), attachment_id, current_user)
    if not await storage.exists(attachment.file_path):
        logger.warning(
            "Attachment file missing from storage",
            extra={"attachment_id": attachment.id},
        )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment file not found")

    if not storage.is_local:
        url = await storage.download_url(attachment.file_path, attachment.file_name)
        return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return FileResponse(
        storage.path_for(attachment.file_path),
        media_type=attachment.content_type,
        filename=attachment.file_name,
    )


@router.post("", response_model=AttachmentPublic, status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    file: Annotated[UploadFile, File()],
    current_user: CurrentUser,
    db: DbSession,
    storage: Storage,
) -> AttachmentPublic:
    """
    Upload a file as a new attachment.

    Raises:
        HTTPException: 400 when the file is empty or larger than the upload limit,
            503 when storage rejects the file
    """
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    if len(content) > get_settings().max_upload_bytes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File too large")

    file_name = file.filename or "upload"
    content_type = file.content_type or storage.guess_content_type(file_name)
    key = storage.generate_key(current_user.organization_id, file_name)
    if not await storage.save(key, content, content_type):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to store attachment file"
        )

    attachment = Attachment(
        file_name=file_name,
        content_type=content_type,
        size=len(content),
        file_path=key,
        organization_id=current_user.organization_id,
    )
    try:
        attachment = await AttachmentRepository(db).create(attachment)
    except Exception:
        await storage.delete(key)
        raise

    logger.info(
        f"Uploaded attachment {file_name}",
        extra={"organization_id": current_user.organization_id, "attachment_id": attachment.id},
    )
    return AttachmentPublic.model_validate(attachment)


@router.post("/{attachment_id}/ticket/{ticket_id}", response_model=SuccessResponse)
async def link_to_ticket(
    attachment_id: int,
    ticket_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    """
    Attach an attachment to a ticket.

    Raises:
        HTTPException: 409 if already attached
    """
    repo = AttachmentRepository(db)
    attachment = await _get_attachment(repo, attachment_id, current_user)
    ensure_owned(await TicketRepository(db).get_by_id(ticket_id), current_user, "Ticket")

    try:
        await repo.link_ticket(attachment.id, ticket_id)
    except IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Attachment already linked to ticket"
        ) from e
    return SuccessResponse()


@router.delete("/{attachment_id}/ticket/{ticket_id}", response_model=SuccessResponse)
async def unlink_from_ticket(
    attachment_id: int,
    ticket_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    repo = AttachmentRepository(db)
    attachment = await _get_attachment(repo, attachment_id, current_user)
    if not await repo.unlink_ticket(attachment.id, ticket_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not linked to ticket"
        )
    return SuccessResponse()


@router.post("/{attachment_id}/comment/{comment_id}", response_model=SuccessResponse)
async def link_to_comment(
    attachment_id: int,
    comment_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    """
    Attach an attachment to a comment.

    Raises:
        HTTPException: 409 if already attached
    """
    repo = AttachmentRepository(db)
    attachment = await _get_attachment(repo, attachment_id, current_user)
    ensure_owned(await CommentRepository(db).get_by_id(comment_id), current_user, "Comment")

    try:
        await repo.link_comment(attachment.id, comment_id)
    except IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Attachment already linked to comment"
        ) from e
    return SuccessResponse()


@router.delete("/{attachment_id}/comment/{comment_id}", response_model=SuccessResponse)
async def unlink_from_comment(
    attachment_id: int,
    comment_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> SuccessResponse:
    repo = AttachmentRepository(db)
    attachment = await _get_attachment(repo, attachment_id, current_user)
    if not await repo.unlink_comment(attachment.id, comment_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not linked to comment"
        )
    return SuccessResponse()


@router.delete("/{attachment_id}", response_model=SuccessResponse)
async def delete_attachment(
    attachment_id: int,
    current_user: CurrentUser,
    db: DbSession,
    storage: Storage,
) -> SuccessResponse:
    """Delete an attachment and its stored file."""
    repo = AttachmentRepository(db)
    attachment = await _get_attachment(repo, attachment_id, current_user)
    file_path = attachment.file_path

    await repo.delete(attachment)
    await storage.delete(file_path)
    logger.info(
        "Deleted attachment",
        extra={"organization_id": current_user.organization_id, "attachment_id": attachment_id},
    )
    return SuccessResponse()
