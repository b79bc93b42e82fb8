"""Task comments."""
from datetime import datetime

from internhub import rbac
from internhub.errors import AuthorizationError
from internhub.models.comment import Comment, CommentCreate, CommentUpdate
from internhub.models.task import Task
from internhub.models.user import User, UserRole
from internhub.services.lookups import get_or_404


def _ensure_author_or_admin(principal: User, comment: Comment) -> None:
    if principal.role != UserRole.ADMIN and comment.user_id != str(principal.id):
        raise AuthorizationError("Only the author or an admin can change this comment.")


async def create_comment(principal: User, payload: CommentCreate) -> Comment:
    rbac.authorize(principal, "comments.write")
    task = await get_or_404(Task, payload.task_id, "Task")
    comment = Comment(task_id=str(task.id), user_id=str(principal.id), body=payload.body)
    await comment.insert()
    return comment


async def list_comments(task_id: str | None = None) -> list[Comment]:
    query = {"task_id": task_id} if task_id else {}
    return await Comment.find(query).sort(-Comment.created_at).to_list()


async def update_comment(principal: User, comment_id: str, payload: CommentUpdate) -> Comment:
    comment = await get_or_404(Comment, comment_id, "Comment")
    _ensure_author_or_admin(principal, comment)
    comment.body = payload.body
    comment.updated_at = datetime.utcnow()
    await comment.save()
    return comment


async def delete_comment(principal: User, comment_id: str) -> None:
    comment = await get_or_404(Comment, comment_id, "Comment")
    _ensure_author_or_admin(principal, comment)
    await comment.delete()
