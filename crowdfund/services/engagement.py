"""Likes and comments."""
import uuid
from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.security import CurrentUser, ensure_owner
from ..models.campaign import Comment, Like
from ..models.user import User
from ..schemas.campaign import CommentResponse
from .campaigns import get_campaign_or_404


class EngagementService:
    """Likes and comments on campaigns."""

    async def like(self, db: AsyncSession, user: CurrentUser, campaign_id: uuid.UUID) -> None:
        """Like a campaign; liking twice is a no-op."""
        await get_campaign_or_404(db, campaign_id)

        existing = await db.execute(
            select(Like.id).where(Like.user_id == user.id, Like.campaign_id == campaign_id)
        )
        if existing.scalar_one_or_none() is not None:
            return

        db.add(Like(user_id=user.id, campaign_id=campaign_id))
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent like from the same user
            await db.rollback()

    async def unlike(self, db: AsyncSession, user: CurrentUser, campaign_id: uuid.UUID) -> None:
        await db.execute(
            delete(Like).where(Like.user_id == user.id, Like.campaign_id == campaign_id)
        )
        await db.commit()

    async def like_count(self, db: AsyncSession, campaign_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count(Like.id)).where(Like.campaign_id == campaign_id)
        )
        return result.scalar_one()

    async def add_comment(
        self,
        db: AsyncSession,
        user: CurrentUser,
        campaign_id: uuid.UUID,
        text: str,
    ) -> Comment:
        await get_campaign_or_404(db, campaign_id)

        comment = Comment(user_id=user.id, campaign_id=campaign_id, comment=text)
        db.add(comment)
        await db.commit()
        await db.refresh(comment)
        return comment

    async def list_comments(
        self,
        db: AsyncSession,
        campaign_id: uuid.UUID,
    ) -> List[CommentResponse]:
        """Comments on a campaign, newest first, with author names."""
        stmt = (
            select(Comment, User.name)
            .join(User, Comment.user_id == User.id)
            .where(Comment.campaign_id == campaign_id)
            .order_by(Comment.created_at.desc())
        )
        result = await db.execute(stmt)
        comments = []
        for comment, name in result.all():
            response = CommentResponse.model_validate(comment)
            response.name = name
            comments.append(response)
        return comments

    async def _owned_comment(
        self,
        db: AsyncSession,
        user: CurrentUser,
        comment_id: uuid.UUID,
    ) -> Comment:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        ensure_owner(comment.user_id, user)
        return comment

    async def update_comment(
        self,
        db: AsyncSession,
        user: CurrentUser,
        comment_id: uuid.UUID,
        text: str,
    ) -> Comment:
        comment = await self._owned_comment(db, user, comment_id)
        comment.comment = text
        await db.commit()
        return comment

    async def delete_comment(
        self,
        db: AsyncSession,
        user: CurrentUser,
        comment_id: uuid.UUID,
    ) -> None:
        comment = await self._owned_comment(db, user, comment_id)
        await db.delete(comment)
        await db.commit()
