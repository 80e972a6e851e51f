"""Pydantic schemas for the registration module."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from artsfest.registration.models import ParticipationType, ProgramType


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str


class ProgramResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: ProgramType
    participation_type: ParticipationType
    description: Optional[str] = None


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    team_id: int
    unique_code: str
    profile_image: Optional[str] = None


class ParticipantWithTeam(ParticipantResponse):
    team: TeamResponse

    @classmethod
    def from_parts(cls, participant, team) -> "ParticipantWithTeam":
        return cls(
            id=participant.id,
            full_name=participant.full_name,
            team_id=participant.team_id,
            unique_code=participant.unique_code,
            profile_image=participant.profile_image,
            team=TeamResponse.model_validate(team),
        )


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    participant_id: int
    program_id: int
    registered_at: datetime


class RegistrationWithDetails(RegistrationResponse):
    """A registration joined with its participant (and team) and program."""

    participant: ParticipantWithTeam
    program: ProgramResponse

    @classmethod
    def from_parts(cls, registration, participant, team, program) -> "RegistrationWithDetails":
        return cls(
            id=registration.id,
            participant_id=registration.participant_id,
            program_id=registration.program_id,
            registered_at=registration.registered_at,
            participant=ParticipantWithTeam.from_parts(participant, team),
            program=ProgramResponse.model_validate(program),
        )


# Workflow requests
class FirstRegistration(BaseModel):
    """Step one: personal details."""
    full_name: str = Field(..., min_length=2, max_length=100)
    team_id: int = Field(..., ge=1, description="Please select a team")


class SecondRegistration(BaseModel):
    """Step two: program selection for an issued code."""
    unique_code: str = Field(..., min_length=5, description="Code issued at step one")
    program_ids: List[int] = Field(..., min_length=1, description="Please select at least one program")
    profile_image: Optional[str] = None


# Workflow responses
class IssueCodeResponse(BaseModel):
    participant: ParticipantWithTeam
    unique_code: str
    message: str = "Registration successful! Please save your unique code for program registration."


class ParticipantLookupResponse(BaseModel):
    participant: ParticipantWithTeam
    registrations: List[RegistrationWithDetails]


class RegisterProgramsResponse(BaseModel):
    registrations: List[RegistrationWithDetails]
    new_registrations: int
    message: str


class UploadResponse(BaseModel):
    image_key: str
    image_url: str
    message: str = "Image uploaded successfully"


class StatsResponse(BaseModel):
    total_registered: int
    stage_programs: int
    non_stage_programs: int
    total_programs: int
