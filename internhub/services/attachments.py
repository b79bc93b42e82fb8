"""Task attachments: size/extension checks and storage under attachments/."""
import logging
import uuid
from datetime import datetime
from typing import Optional

from internhub import rbac
from internhub.config import settings
from internhub.errors import AuthorizationError, NotFoundError, ValidationFailed
from internhub.models.attachment import ALLOWED_EXTENSIONS, Attachment
from internhub.models.task import Task
from internhub.models.user import User, UserRole
from internhub.services.lookups import get_or_404
from internhub.services.storage import get_storage

logger = logging.getLogger(__name__)


def validate_upload(filename: str, size: int) -> str:
    """Returns the lower-cased extension, or raises ValidationFailed."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationFailed(
            "Unsupported file type", {"file": [f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"]}
        )
    if size > settings.attachment_max_bytes:
        raise ValidationFailed(
            "File too large", {"file": [f"The file may not be greater than {settings.attachment_max_bytes // 1024} kilobytes."]}
        )
    return ext


def _ensure_owner_or_admin(principal: User, attachment: Attachment) -> None:
    if principal.role != UserRole.ADMIN and attachment.uploaded_by != str(principal.id):
        raise AuthorizationError("Only the uploader or an admin can change this attachment.")


async def upload_attachment(
    principal: User,
    task_id: str,
    filename: str,
    body: bytes,
    content_type: Optional[str] = None,
    description: Optional[str] = None,
) -> Attachment:
    rbac.authorize(principal, "attachments.write")
    task = await get_or_404(Task, task_id, "Task")
    ext = validate_upload(filename, len(body))
    key = f"attachments/{uuid.uuid4().hex}.{ext}"
    await get_storage().save(key, body, content_type or "application/octet-stream")
    attachment = Attachment(
        task_id=str(task.id),
        uploaded_by=str(principal.id),
        path=key,
        original_name=filename,
        file_size=len(body),
        mime_type=content_type,
        description=description,
    )
    await attachment.insert()
    return attachment


async def list_attachments(task_id: Optional[str] = None) -> list[Attachment]:
    query = {"task_id": task_id} if task_id else {}
    return await Attachment.find(query).sort(-Attachment.created_at).to_list()


async def read_attachment(attachment: Attachment) -> bytes:
    body = await get_storage().read(attachment.path)
    if body is None:
        raise NotFoundError("Attachment file not found")
    return body


async def update_description(principal: User, attachment_id: str, description: Optional[str]) -> Attachment:
    attachment = await get_or_404(Attachment, attachment_id, "Attachment")
    _ensure_owner_or_admin(principal, attachment)
    attachment.description = description
    attachment.updated_at = datetime.utcnow()
    await attachment.save()
    return attachment


async def delete_attachment(principal: User, attachment_id: str) -> None:
    attachment = await get_or_404(Attachment, attachment_id, "Attachment")
    _ensure_owner_or_admin(principal, attachment)
    await get_storage().delete(attachment.path)
    await attachment.delete()


def attachment_url(attachment: Attachment) -> str:
    return get_storage().url(attachment.path)
