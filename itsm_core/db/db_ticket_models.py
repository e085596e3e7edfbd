"""
Ticket, comment and ticket history models.

Comments and history entries are append-only and keyed by an integer
sequence, which also gives a stable oldest-first order.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..enums import TicketPriority, TicketStatus
from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import Base


class Ticket(Base, UUIDMixin, TimestampMixin):
    """A support ticket filed under one category."""

    __tablename__ = "ticket"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TicketStatus.TODO.value)
    priority = Column(String(10), nullable=False, default=TicketPriority.MEDIUM.value)
    category_id = Column(
        String(36), ForeignKey("category.id", ondelete="CASCADE"), nullable=False
    )
    assignee_id = Column(
        String(36), ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    tenant_id = Column(String(36), ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False)

    category = relationship("Category")
    assignee = relationship("User")
    comments = relationship(
        "Comment", back_populates="ticket", cascade="all, delete-orphan", order_by="Comment.id"
    )
    history = relationship(
        "TicketHistory",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketHistory.id",
    )

    __table_args__ = (
        Index("ix_ticket_tenant", "tenant_id"),
        Index("ix_ticket_tenant_category", "tenant_id", "category_id"),
        Index("ix_ticket_tenant_status", "tenant_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id='{self.id}', title='{self.title}', status='{self.status}')>"


class Comment(Base):
    """Append-only note on a ticket."""

    __tablename__ = "ticket_comment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), ForeignKey("ticket.id", ondelete="CASCADE"), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    ticket = relationship("Ticket", back_populates="comments")

    __table_args__ = (Index("ix_ticket_comment_ticket", "ticket_id"),)


class TicketHistory(Base):
    """
    One field change on a ticket.

    ``user_id`` is the acting user's raw id without a foreign key so the
    trail outlives user deletion. Assignee and category values are stored as
    raw ids and only resolved to labels when read.
    """

    __tablename__ = "ticket_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), ForeignKey("ticket.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), nullable=False)
    field = Column(String(50), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    ticket = relationship("Ticket", back_populates="history")

    __table_args__ = (Index("ix_ticket_history_ticket", "ticket_id"),)

    def __repr__(self) -> str:
        return (
            f"<TicketHistory(ticket_id='{self.ticket_id}', field='{self.field}', "
            f"old='{self.old_value}', new='{self.new_value}')>"
        )
