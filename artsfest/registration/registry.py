"""Registry - storage for teams, participants, programs and registrations.

``Registry`` is the storage contract used by the registration workflow. It
has two interchangeable backings: ``SqlRegistry`` over a SQLAlchemy session
and ``InMemoryRegistry`` over keyed dicts. The configured backend is
provided to routers through the ``get_registry`` dependency.
"""

import abc
import logging
import threading
from collections import defaultdict
from functools import lru_cache
from typing import Dict, Generator, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from artsfest.common.config import get_settings
from artsfest.common.db import session_scope
from artsfest.common.errors import NotFound, PersistenceConflict
from artsfest.registration.models import (
    Participant,
    ParticipationType,
    Program,
    ProgramType,
    Registration,
    Team,
    name_key,
    utcnow,
)
from artsfest.registration.schemas import ParticipantWithTeam, RegistrationWithDetails

logger = logging.getLogger(__name__)


class Registry(abc.ABC):
    """Storage contract shared by every registry backend."""

    # Teams
    @abc.abstractmethod
    def list_teams(self) -> List[Team]: ...

    @abc.abstractmethod
    def get_team(self, team_id: int) -> Optional[Team]: ...

    @abc.abstractmethod
    def get_team_by_code(self, code: str) -> Optional[Team]: ...

    @abc.abstractmethod
    def create_team(self, name: str, code: str) -> Team: ...

    # Programs
    @abc.abstractmethod
    def list_programs(
        self,
        type: Optional[ProgramType] = None,
        participation_type: Optional[ParticipationType] = None,
    ) -> List[Program]: ...

    @abc.abstractmethod
    def get_program(self, program_id: int) -> Optional[Program]: ...

    @abc.abstractmethod
    def create_program(
        self,
        name: str,
        type: ProgramType,
        participation_type: ParticipationType,
        description: Optional[str] = None,
    ) -> Program: ...

    # Participants
    @abc.abstractmethod
    def get_participant(self, participant_id: int) -> Optional[Participant]: ...

    @abc.abstractmethod
    def get_participant_by_code(self, code: str) -> Optional[Participant]: ...

    @abc.abstractmethod
    def get_participant_by_name(self, full_name: str) -> Optional[Participant]:
        """Case-insensitive lookup by full name."""

    @abc.abstractmethod
    def list_participant_codes(self) -> Set[str]: ...

    @abc.abstractmethod
    def create_participant(
        self,
        full_name: str,
        team_id: int,
        unique_code: str,
        profile_image: Optional[str] = None,
    ) -> Participant:
        """
        Persist a participant.

        Raises PersistenceConflict without writing anything if
        ``unique_code`` is already taken.
        """

    @abc.abstractmethod
    def update_participant_image(self, participant_id: int, image_url: str) -> Optional[Participant]: ...

    # Registrations
    @abc.abstractmethod
    def list_registrations(self, participant_id: Optional[int] = None) -> List[Registration]: ...

    @abc.abstractmethod
    def create_registration(self, participant_id: int, program_id: int) -> Registration: ...

    @abc.abstractmethod
    def delete_registration(self, registration_id: int) -> bool: ...

    # Joined reads
    def resolve_participant_with_team(self, participant_id: int) -> ParticipantWithTeam:
        participant = self.get_participant(participant_id)
        if participant is None:
            raise NotFound("Participant not found")
        team = self.get_team(participant.team_id)
        if team is None:
            raise NotFound("Team not found")
        return ParticipantWithTeam.from_parts(participant, team)

    def resolve_registrations_with_details(
        self,
        participant_id: Optional[int] = None,
    ) -> List[RegistrationWithDetails]:
        """
        Join registrations to their participant, team and program.

        Rows whose participant, team or program cannot be resolved are left
        out of the result.
        """
        details = []
        for registration in self.list_registrations(participant_id):
            participant = self.get_participant(registration.participant_id)
            program = self.get_program(registration.program_id)
            team = self.get_team(participant.team_id) if participant else None
            if participant is None or program is None or team is None:
                continue
            details.append(RegistrationWithDetails.from_parts(registration, participant, team, program))
        return details


class InMemoryRegistry(Registry):
    """Registry backed by keyed dicts with sequential id counters."""

    def __init__(self):
        self._lock = threading.RLock()
        self._teams: Dict[int, Team] = {}
        self._programs: Dict[int, Program] = {}
        self._participants: Dict[int, Participant] = {}
        self._registrations: Dict[int, Registration] = {}
        self._counters: Dict[str, int] = defaultdict(int)

    def _next_id(self, collection: str) -> int:
        self._counters[collection] += 1
        return self._counters[collection]

    # Teams
    def list_teams(self) -> List[Team]:
        with self._lock:
            return list(self._teams.values())

    def get_team(self, team_id: int) -> Optional[Team]:
        with self._lock:
            return self._teams.get(team_id)

    def get_team_by_code(self, code: str) -> Optional[Team]:
        with self._lock:
            return next((t for t in self._teams.values() if t.code == code), None)

    def create_team(self, name: str, code: str) -> Team:
        with self._lock:
            for team in self._teams.values():
                if team.name == name or team.code == code:
                    raise PersistenceConflict(f"Team {name} ({code}) already exists")
            team = Team(id=self._next_id("teams"), name=name, code=code)
            self._teams[team.id] = team
            return team

    # Programs
    def list_programs(self, type=None, participation_type=None) -> List[Program]:
        with self._lock:
            programs = list(self._programs.values())
        if type is not None:
            programs = [p for p in programs if p.type == type]
        if participation_type is not None:
            programs = [p for p in programs if p.participation_type == participation_type]
        return programs

    def get_program(self, program_id: int) -> Optional[Program]:
        with self._lock:
            return self._programs.get(program_id)

    def create_program(self, name, type, participation_type, description=None) -> Program:
        with self._lock:
            program = Program(
                id=self._next_id("programs"),
                name=name,
                type=ProgramType(type),
                participation_type=ParticipationType(participation_type),
                description=description,
            )
            self._programs[program.id] = program
            return program

    # Participants
    def get_participant(self, participant_id: int) -> Optional[Participant]:
        with self._lock:
            return self._participants.get(participant_id)

    def get_participant_by_code(self, code: str) -> Optional[Participant]:
        with self._lock:
            return next((p for p in self._participants.values() if p.unique_code == code), None)

    def get_participant_by_name(self, full_name: str) -> Optional[Participant]:
        wanted = name_key(full_name)
        with self._lock:
            return next((p for p in self._participants.values() if p.full_name_key == wanted), None)

    def list_participant_codes(self) -> Set[str]:
        with self._lock:
            return {p.unique_code for p in self._participants.values()}

    def create_participant(self, full_name, team_id, unique_code, profile_image=None) -> Participant:
        with self._lock:
            if any(p.unique_code == unique_code for p in self._participants.values()):
                raise PersistenceConflict(f"Code {unique_code} is already taken")
            participant = Participant(
                id=self._next_id("participants"),
                full_name=full_name,
                full_name_key=name_key(full_name),
                team_id=team_id,
                unique_code=unique_code,
                profile_image=profile_image,
            )
            self._participants[participant.id] = participant
            return participant

    def update_participant_image(self, participant_id: int, image_url: str) -> Optional[Participant]:
        with self._lock:
            participant = self._participants.get(participant_id)
            if participant is not None:
                participant.profile_image = image_url
            return participant

    # Registrations
    def list_registrations(self, participant_id: Optional[int] = None) -> List[Registration]:
        with self._lock:
            registrations = list(self._registrations.values())
        if participant_id is not None:
            registrations = [r for r in registrations if r.participant_id == participant_id]
        return registrations

    def create_registration(self, participant_id: int, program_id: int) -> Registration:
        with self._lock:
            for existing in self._registrations.values():
                if existing.participant_id == participant_id and existing.program_id == program_id:
                    raise PersistenceConflict("Participant already registered for this program")
            registration = Registration(
                id=self._next_id("registrations"),
                participant_id=participant_id,
                program_id=program_id,
                registered_at=utcnow(),
            )
            self._registrations[registration.id] = registration
            return registration

    def delete_registration(self, registration_id: int) -> bool:
        with self._lock:
            return self._registrations.pop(registration_id, None) is not None


class SqlRegistry(Registry):
    """Registry backed by a SQLAlchemy session. Every write commits."""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, conflict_detail: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity error on commit: {e.orig}")
            raise PersistenceConflict(conflict_detail) from e

    # Teams
    def list_teams(self) -> List[Team]:
        return list(self.session.execute(select(Team).order_by(Team.id)).scalars().all())

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.session.get(Team, team_id)

    def get_team_by_code(self, code: str) -> Optional[Team]:
        return self.session.execute(select(Team).where(Team.code == code)).scalar_one_or_none()

    def create_team(self, name: str, code: str) -> Team:
        team = Team(name=name, code=code)
        self.session.add(team)
        self._commit(f"Team {name} ({code}) already exists")
        self.session.refresh(team)
        return team

    # Programs
    def list_programs(self, type=None, participation_type=None) -> List[Program]:
        stmt = select(Program)
        if type is not None:
            stmt = stmt.where(Program.type == type)
        if participation_type is not None:
            stmt = stmt.where(Program.participation_type == participation_type)
        return list(self.session.execute(stmt.order_by(Program.id)).scalars().all())

    def get_program(self, program_id: int) -> Optional[Program]:
        return self.session.get(Program, program_id)

    def create_program(self, name, type, participation_type, description=None) -> Program:
        program = Program(
            name=name,
            type=ProgramType(type),
            participation_type=ParticipationType(participation_type),
            description=description,
        )
        self.session.add(program)
        self._commit(f"Program {name} could not be created")
        self.session.refresh(program)
        return program

    # Participants
    def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self.session.get(Participant, participant_id)

    def get_participant_by_code(self, code: str) -> Optional[Participant]:
        stmt = select(Participant).where(Participant.unique_code == code)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_participant_by_name(self, full_name: str) -> Optional[Participant]:
        stmt = select(Participant).where(Participant.full_name_key == name_key(full_name)).limit(1)
        return self.session.execute(stmt).scalars().first()

    def list_participant_codes(self) -> Set[str]:
        return set(self.session.execute(select(Participant.unique_code)).scalars().all())

    def create_participant(self, full_name, team_id, unique_code, profile_image=None) -> Participant:
        participant = Participant(
            full_name=full_name,
            full_name_key=name_key(full_name),
            team_id=team_id,
            unique_code=unique_code,
            profile_image=profile_image,
        )
        self.session.add(participant)
        self._commit(f"Code {unique_code} is already taken")
        self.session.refresh(participant)
        return participant

    def update_participant_image(self, participant_id: int, image_url: str) -> Optional[Participant]:
        participant = self.session.get(Participant, participant_id)
        if participant is None:
            return None
        participant.profile_image = image_url
        self.session.commit()
        self.session.refresh(participant)
        return participant

    # Registrations
    def list_registrations(self, participant_id: Optional[int] = None) -> List[Registration]:
        stmt = select(Registration)
        if participant_id is not None:
            stmt = stmt.where(Registration.participant_id == participant_id)
        return list(self.session.execute(stmt.order_by(Registration.id)).scalars().all())

    def create_registration(self, participant_id: int, program_id: int) -> Registration:
        registration = Registration(
            participant_id=participant_id,
            program_id=program_id,
            registered_at=utcnow(),
        )
        self.session.add(registration)
        self._commit("Participant already registered for this program")
        self.session.refresh(registration)
        return registration

    def delete_registration(self, registration_id: int) -> bool:
        registration = self.session.get(Registration, registration_id)
        if registration is None:
            return False
        self.session.delete(registration)
        self.session.commit()
        return True

    def resolve_registrations_with_details(
        self,
        participant_id: Optional[int] = None,
    ) -> List[RegistrationWithDetails]:
        # Inner joins leave out orphaned rows
        stmt = (
            select(Registration, Participant, Team, Program)
            .join(Participant, Registration.participant_id == Participant.id)
            .join(Team, Participant.team_id == Team.id)
            .join(Program, Registration.program_id == Program.id)
        )
        if participant_id is not None:
            stmt = stmt.where(Registration.participant_id == participant_id)
        rows = self.session.execute(stmt.order_by(Registration.id)).all()
        return [
            RegistrationWithDetails.from_parts(registration, participant, team, program)
            for registration, participant, team, program in rows
        ]


@lru_cache(maxsize=1)
def get_memory_registry() -> InMemoryRegistry:
    """Process-wide in-memory registry."""
    return InMemoryRegistry()


def get_registry() -> Generator[Registry, None, None]:
    """FastAPI dependency that provides the configured registry backend."""
    if get_settings().registry_backend == "memory":
        yield get_memory_registry()
        return
    with session_scope() as session:
        yield SqlRegistry(session)
