from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String

from clubstats.db.base import Base, new_id

MEMBER_ACTIVE = "Active"
MEMBER_INACTIVE = "Inactive"
MEMBER_SYSTEM = "System"  # service accounts, never ranked


class Club(Base):
    __tablename__ = "clubs"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=new_id)
    club_id = Column(String(36), ForeignKey("clubs.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    nickname = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)

    status = Column(String, nullable=False, default=MEMBER_ACTIVE)

    birth_date = Column(Date, nullable=True)
    registration_date = Column(Date, nullable=True)

    __table_args__ = (
        Index("ix_members_club_status", "club_id", "status"),
    )
