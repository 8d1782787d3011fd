"""ORM model for complaints submitted by users."""

from sqlalchemy import Column, DateTime, Integer, String, func

from app.models.base import Base

TITLE_MAX_LEN = 100
DESCRIPTION_MAX_LEN = 1000


class Complaint(Base):
    """
    One complaint owned by the submitting user.

    user_id is deliberately not a foreign key: owner existence is not enforced.
    status is one of Pending, In Progress, Resolved (see services.complaint_status).
    """

    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(TITLE_MAX_LEN), nullable=False)
    description = Column(String(DESCRIPTION_MAX_LEN), nullable=False)
    category = Column(String(32), nullable=False, index=True)
    priority = Column(String(16), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="Pending", index=True)
    date_submitted = Column(DateTime(timezone=True), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
