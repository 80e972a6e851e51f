"""Public registration router - teams, programs and the two registration steps."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from artsfest.common.schemas import Message
from artsfest.common.storage import get_file_url, save_profile_image
from artsfest.registration import schemas
from artsfest.registration.models import ParticipationType, ProgramType
from artsfest.registration.registry import Registry, get_registry
from artsfest.registration.reports import compute_stats
from artsfest.registration.service import RegistrationWorkflow

router = APIRouter()


@router.get("/teams", response_model=List[schemas.TeamResponse])
def list_teams(registry: Registry = Depends(get_registry)):
    return registry.list_teams()


@router.get("/programs", response_model=List[schemas.ProgramResponse])
def list_programs(
    type: Optional[ProgramType] = Query(None, description="'stage' or 'non-stage'"),
    participation_type: Optional[ParticipationType] = Query(
        None, description="'group' or 'individual' (only applied together with type)"
    ),
    registry: Registry = Depends(get_registry),
):
    if type is None:
        return registry.list_programs()
    return registry.list_programs(type=type, participation_type=participation_type)


@router.get("/stats", response_model=schemas.StatsResponse)
def get_stats(registry: Registry = Depends(get_registry)):
    return compute_stats(registry.resolve_registrations_with_details())


@router.post("/register/first", response_model=schemas.IssueCodeResponse)
def register_first(payload: schemas.FirstRegistration, registry: Registry = Depends(get_registry)):
    """Step one: create the participant and issue a unique code."""
    workflow = RegistrationWorkflow(registry)
    return workflow.issue_code(payload.full_name, payload.team_id)


@router.get("/participant/{code}", response_model=schemas.ParticipantLookupResponse)
def get_participant(code: str, registry: Registry = Depends(get_registry)):
    """Validate a code and return the participant with their registrations."""
    workflow = RegistrationWorkflow(registry)
    return workflow.lookup_by_code(code)


@router.post("/register/second", response_model=schemas.RegisterProgramsResponse)
def register_second(payload: schemas.SecondRegistration, registry: Registry = Depends(get_registry)):
    """Step two: register for programs. Already registered programs are skipped."""
    workflow = RegistrationWorkflow(registry)
    return workflow.register_programs(payload.unique_code, payload.program_ids, payload.profile_image)


@router.post("/upload/profile", response_model=schemas.UploadResponse)
def upload_profile_image(image: UploadFile = File(...)):
    """Store the image and return its key (sent back at step two) and a temporary URL."""
    object_key = save_profile_image(image)
    return schemas.UploadResponse(image_key=object_key, image_url=get_file_url(object_key))


@router.delete("/registration/{registration_id}", response_model=Message)
def delete_registration(registration_id: int, registry: Registry = Depends(get_registry)):
    workflow = RegistrationWorkflow(registry)
    if not workflow.delete_registration(registration_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registration not found"
        )
    return Message(message="Registration deleted successfully")


@router.get("/registrations", response_model=List[schemas.RegistrationWithDetails])
def list_registrations(registry: Registry = Depends(get_registry)):
    """All registrations with participant, team and program details."""
    return registry.resolve_registrations_with_details()
