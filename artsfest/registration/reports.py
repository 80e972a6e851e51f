"""Reports built over joined registration records."""

from typing import Any, Dict, List, Sequence

from artsfest.common.storage import get_file_url
from artsfest.registration.models import ProgramType, utcnow
from artsfest.registration.schemas import RegistrationWithDetails, StatsResponse

EXPORT_HEADERS = [
    "Participant Name",
    "Team",
    "Unique Code",
    "Program Name",
    "Program Type",
    "Participation Type",
    "Registration Date",
]


def compute_stats(registrations: Sequence[RegistrationWithDetails]) -> StatsResponse:
    return StatsResponse(
        total_registered=len({r.participant_id for r in registrations}),
        stage_programs=sum(1 for r in registrations if r.program.type == ProgramType.STAGE),
        non_stage_programs=sum(1 for r in registrations if r.program.type == ProgramType.NON_STAGE),
        total_programs=len(registrations),
    )


def export_rows(registrations: Sequence[RegistrationWithDetails]) -> List[List[Any]]:
    return [
        [
            r.participant.full_name,
            r.participant.team.name,
            r.participant.unique_code,
            r.program.name,
            r.program.type.value,
            r.program.participation_type.value,
            r.registered_at.date().isoformat(),
        ]
        for r in registrations
    ]


def export_document(registrations: Sequence[RegistrationWithDetails]) -> Dict[str, Any]:
    """Nested export of all registrations, as served by the JSON download."""
    return {
        "export_date": utcnow().isoformat(),
        "total_registrations": len(registrations),
        "registrations": [
            {
                "participant": {
                    "name": r.participant.full_name,
                    "team": r.participant.team.name,
                    "code": r.participant.unique_code,
                },
                "program": {
                    "name": r.program.name,
                    "type": r.program.type.value,
                    "participation_type": r.program.participation_type.value,
                    "description": r.program.description,
                },
                "registration_date": r.registered_at.isoformat(),
            }
            for r in registrations
        ],
    }


def participant_report(lookup) -> Dict[str, Any]:
    """Summary of one participant and their programs (individual report / ID card data)."""
    participant = lookup.participant
    return {
        "name": participant.full_name,
        "team": participant.team.name,
        "code": participant.unique_code,
        "profile_image": participant.profile_image,
        "profile_image_url": get_file_url(participant.profile_image) if participant.profile_image else None,
        "program_count": len(lookup.registrations),
        "programs": [
            {
                "name": r.program.name,
                "type": r.program.type.value,
                "participation_type": r.program.participation_type.value,
                "registered_at": r.registered_at.isoformat(),
            }
            for r in lookup.registrations
        ],
    }
