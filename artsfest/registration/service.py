"""Registration workflow - two-step participant onboarding.

Step one issues a participant code for a name and team. Step two enrolls the
participant identified by that code into programs. Returning participants
start directly at step two with their code.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional

from artsfest.common.config import get_settings
from artsfest.common.errors import (
    DuplicateName,
    InvalidCode,
    InvalidTeam,
    PersistenceConflict,
    ValidationError,
)
from artsfest.registration.codes import generate_code
from artsfest.registration.models import Participant
from artsfest.registration.registry import Registry
from artsfest.registration import schemas

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

# Code issuance is serialized per team prefix within the process
_issue_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
_issue_locks_guard = threading.Lock()


def _issue_lock(team_prefix: str) -> threading.Lock:
    with _issue_locks_guard:
        return _issue_locks[team_prefix]


class RegistrationWorkflow:
    def __init__(self, registry: Registry, max_code_attempts: Optional[int] = None):
        self.registry = registry
        self.max_code_attempts = max_code_attempts or get_settings().code_issue_attempts

    def issue_code(self, full_name: str, team_id: int) -> schemas.IssueCodeResponse:
        """
        Step one: create a participant and issue its unique code.

        Raises:
            ValidationError: name shorter than 2 or longer than 100 characters
            DuplicateName: a participant with the same name (ignoring case) exists
            InvalidTeam: team does not exist
            PersistenceConflict: no free code could be claimed after retrying
        """
        full_name = (full_name or "").strip()
        if not NAME_MIN_LENGTH <= len(full_name) <= NAME_MAX_LENGTH:
            raise ValidationError(
                f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
            )

        if self.registry.get_participant_by_name(full_name):
            raise DuplicateName()

        team = self.registry.get_team(team_id)
        if not team:
            raise InvalidTeam()

        with _issue_lock(team.code):
            participant = self._create_with_fresh_code(full_name, team.id, team.code)

        logger.info(f"Issued code {participant.unique_code} to participant {participant.id}")
        return schemas.IssueCodeResponse(
            participant=self.registry.resolve_participant_with_team(participant.id),
            unique_code=participant.unique_code,
        )

    def _create_with_fresh_code(self, full_name: str, team_id: int, team_prefix: str) -> Participant:
        for attempt in range(1, self.max_code_attempts + 1):
            code = generate_code(team_prefix, self.registry.list_participant_codes())
            try:
                return self.registry.create_participant(
                    full_name=full_name,
                    team_id=team_id,
                    unique_code=code,
                    profile_image=None,
                )
            except PersistenceConflict:
                logger.warning(
                    f"Code {code} was claimed concurrently (attempt {attempt}/{self.max_code_attempts})"
                )
        raise PersistenceConflict("Could not issue a unique code, please try again")

    def lookup_by_code(self, code: str) -> schemas.ParticipantLookupResponse:
        """Resolve a participant and its registrations from an issued code."""
        participant = self.registry.get_participant_by_code(code)
        if not participant:
            raise InvalidCode()

        return schemas.ParticipantLookupResponse(
            participant=self.registry.resolve_participant_with_team(participant.id),
            registrations=self.registry.resolve_registrations_with_details(participant.id),
        )

    def register_programs(
        self,
        code: str,
        program_ids: List[int],
        profile_image: Optional[str] = None,
    ) -> schemas.RegisterProgramsResponse:
        """
        Step two: register the participant for the given programs.

        Programs the participant is already registered for are skipped, so
        re-submitting a selection is harmless.

        Raises:
            ValidationError: empty program list or unknown program ids
            InvalidCode: code does not belong to any participant
        """
        if not program_ids:
            raise ValidationError("Please select at least one program")

        participant = self.registry.get_participant_by_code(code)
        if not participant:
            raise InvalidCode("Invalid code")

        requested = list(dict.fromkeys(program_ids))
        unknown = [pid for pid in requested if self.registry.get_program(pid) is None]
        if unknown:
            raise ValidationError(f"Unknown program id(s): {', '.join(str(pid) for pid in unknown)}")

        if profile_image:
            self.registry.update_participant_image(participant.id, profile_image)

        already_registered = {r.program_id for r in self.registry.list_registrations(participant.id)}
        added = []
        for program_id in requested:
            if program_id in already_registered:
                continue
            try:
                self.registry.create_registration(participant_id=participant.id, program_id=program_id)
            except PersistenceConflict:
                # Registered by a concurrent request since the read above
                logger.info(f"Participant {code} already registered for program {program_id}, skipping")
                continue
            added.append(program_id)

        if added:
            logger.info(f"Participant {code} registered for programs {added}")

        return schemas.RegisterProgramsResponse(
            registrations=self.registry.resolve_registrations_with_details(participant.id),
            new_registrations=len(added),
            message=f"Successfully registered for {len(added)} program(s)",
        )

    def delete_registration(self, registration_id: int) -> bool:
        """Remove a single registration. Returns False if it does not exist."""
        deleted = self.registry.delete_registration(registration_id)
        if deleted:
            logger.info(f"Deleted registration {registration_id}")
        return deleted
