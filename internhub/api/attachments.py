"""Task attachments (uploads are limited in size and type)."""
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import Response

from internhub.api.deps import CurrentUser
from internhub.models.attachment import Attachment, AttachmentUpdate
from internhub.services import attachments
from internhub.services.lookups import get_or_404, serialize

router = APIRouter()


def _out(attachment: Attachment) -> dict:
    return {**serialize(attachment), "url": attachments.attachment_url(attachment)}


@router.get("/")
async def list_attachments(user: CurrentUser, task_id: Optional[str] = None):
    return [_out(a) for a in await attachments.list_attachments(task_id)]


@router.post("/", status_code=201)
async def upload_attachment(
    user: CurrentUser,
    task_id: str = Form(...),
    description: Optional[str] = Form(default=None, max_length=255),
    file: UploadFile = File(...),
):
    body = await file.read()
    attachment = await attachments.upload_attachment(
        user, task_id, file.filename or "upload", body, file.content_type, description
    )
    return _out(attachment)


@router.get("/{attachment_id}")
async def show_attachment(attachment_id: str, user: CurrentUser):
    return _out(await get_or_404(Attachment, attachment_id, "Attachment"))


@router.get("/{attachment_id}/download")
async def download_attachment(attachment_id: str, user: CurrentUser):
    attachment = await get_or_404(Attachment, attachment_id, "Attachment")
    body = await attachments.read_attachment(attachment)
    return Response(
        content=body,
        media_type=attachment.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{attachment.original_name}"'},
    )


@router.put("/{attachment_id}")
async def update_attachment(attachment_id: str, data: AttachmentUpdate, user: CurrentUser):
    return _out(await attachments.update_description(user, attachment_id, data.description))


@router.delete("/{attachment_id}")
async def delete_attachment(attachment_id: str, user: CurrentUser):
    await attachments.delete_attachment(user, attachment_id)
    return {"message": "Attachment deleted"}
