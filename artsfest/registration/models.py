from datetime import datetime, timezone
from typing import List, Optional
import enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artsfest.common.db import Base


def name_key(full_name: str) -> str:
    """Case-insensitive lookup key for participant names."""
    return full_name.strip().casefold()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgramType(str, enum.Enum):
    STAGE = "stage"
    NON_STAGE = "non-stage"


class ParticipationType(str, enum.Enum):
    GROUP = "group"
    INDIVIDUAL = "individual"


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)

    participants: Mapped[List["Participant"]] = relationship("Participant", back_populates="team")


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    full_name_key: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=False)
    unique_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    profile_image: Mapped[Optional[str]] = mapped_column(String(500))

    team: Mapped[Team] = relationship("Team", back_populates="participants")


class Program(Base):
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[ProgramType] = mapped_column(
        SAEnum(ProgramType, values_callable=lambda e: [m.value for m in e], name="programtype"),
        nullable=False,
    )
    participation_type: Mapped[ParticipationType] = mapped_column(
        SAEnum(ParticipationType, values_callable=lambda e: [m.value for m in e], name="participationtype"),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(String(1000))


class Registration(Base):
    __tablename__ = "registrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    participant_id: Mapped[int] = mapped_column(ForeignKey("participants.id"), nullable=False)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("participant_id", "program_id", name="uq_registration_per_participant"),
    )

    participant: Mapped[Participant] = relationship("Participant")
    program: Mapped[Program] = relationship("Program")
