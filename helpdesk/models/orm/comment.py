"""
Comment ORM models.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.models.enums import AuthorType
from helpdesk.models.orm.base import Base, TimestampMixin


class Comment(TimestampMixin, Base):
    """Comment database table."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id", ondelete="CASCADE"))
    body: Mapped[str] = mapped_column(Text)
    body_html: Mapped[str] = mapped_column(Text)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)
    author_type: Mapped[AuthorType] = mapped_column(String(20), default=AuthorType.USER.value)
    author_id: Mapped[int] = mapped_column()
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_comments_ticket_id", "ticket_id"),
        Index("ix_comments_organization_id", "organization_id"),
    )


class CommentAttachment(TimestampMixin, Base):
    """Comment to attachment link table."""

    __tablename__ = "comment_attachments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(ForeignKey("comments.id", ondelete="CASCADE"))
    attachment_id: Mapped[int] = mapped_column(
        ForeignKey("attachments.id", ondelete="CASCADE")
    )

    __table_args__ = (
        UniqueConstraint("comment_id", "attachment_id", name="uq_comment_attachments_pair"),
    )
