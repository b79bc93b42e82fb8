"""Task comments."""
from typing import Optional

from fastapi import APIRouter

from internhub.api.deps import CurrentUser
from internhub.models.comment import Comment, CommentCreate, CommentUpdate
from internhub.services import comments
from internhub.services.lookups import get_or_404, serialize

router = APIRouter()


@router.get("/")
async def list_comments(user: CurrentUser, task_id: Optional[str] = None):
    return [serialize(c) for c in await comments.list_comments(task_id)]


@router.post("/", status_code=201)
async def create_comment(data: CommentCreate, user: CurrentUser):
    return serialize(await comments.create_comment(user, data))


@router.get("/{comment_id}")
async def show_comment(comment_id: str, user: CurrentUser):
    return serialize(await get_or_404(Comment, comment_id, "Comment"))


@router.put("/{comment_id}")
async def update_comment(comment_id: str, data: CommentUpdate, user: CurrentUser):
    return serialize(await comments.update_comment(user, comment_id, data))


@router.delete("/{comment_id}")
async def delete_comment(comment_id: str, user: CurrentUser):
    await comments.delete_comment(user, comment_id)
    return {"message": "Comment deleted"}
