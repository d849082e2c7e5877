"""Board, column, membership and label models for SQLModel."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from taskboard.config import utc_now


def _uuid() -> str:
    return str(uuid.uuid4())


class Board(SQLModel, table=True):
    """Board entity owning columns, labels and members."""

    id: str = Field(default_factory=_uuid, primary_key=True)
    name: str = Field(max_length=200, min_length=1)
    created_at: datetime = Field(default_factory=utc_now)


class BoardMember(SQLModel, table=True):
    """Membership of a user on a board; decides which boards an actor can see."""

    __tablename__ = "board_member"
    __table_args__ = (UniqueConstraint("board_id", "user_id", name="uq_board_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    board_id: str = Field(
        sa_column=Column(String, ForeignKey("board.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    user_id: str = Field(max_length=100, index=True)
    role: str = Field(default="member", max_length=20)  # owner, admin, member, viewer


class BoardColumn(SQLModel, table=True):
    """A column (list) on a board; tasks are ordered by position inside it."""

    __tablename__ = "board_column"

    id: str = Field(default_factory=_uuid, primary_key=True)
    board_id: str = Field(
        sa_column=Column(String, ForeignKey("board.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    name: str = Field(max_length=100)
    position: int = Field(default=0)


class Label(SQLModel, table=True):
    """Board-scoped label."""

    id: str = Field(default_factory=_uuid, primary_key=True)
    board_id: str = Field(
        sa_column=Column(String, ForeignKey("board.id", ondelete="CASCADE"), index=True, nullable=False)
    )
    name: str = Field(max_length=50)
    color: str = Field(default="#6b7280", max_length=20)
