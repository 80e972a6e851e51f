"""Seed teams and programs into an empty registry."""

import logging

from artsfest.registration.models import ParticipationType, ProgramType
from artsfest.registration.registry import Registry

logger = logging.getLogger(__name__)

TEAMS = [
    ("QUDS Team", "QU"),
    ("BADR Team", "BA"),
    ("NOOR Team", "NO"),
    ("FAJR Team", "FA"),
]

PROGRAMS = [
    ("Arabic Speech 01", ProgramType.STAGE, ParticipationType.GROUP, "مسابقة الخطابة العربية للمجموعات"),
    ("Arabic Song 02", ProgramType.STAGE, ParticipationType.GROUP, "العروض المسرحية الجماعية"),
    ("Arabic Story telling 03", ProgramType.STAGE, ParticipationType.GROUP, "الأداء الموسيقي الجماعي"),
    ("Malayalam Song 04", ProgramType.STAGE, ParticipationType.GROUP, "إلقاء الشعر الجماعي"),
    ("Arabic Speech 05", ProgramType.STAGE, ParticipationType.INDIVIDUAL, "أداء الرقص الفردي"),
    ("Arabic Speech 06", ProgramType.STAGE, ParticipationType.INDIVIDUAL, "الغناء الفردي"),
    ("Arabic Speech 07", ProgramType.STAGE, ParticipationType.INDIVIDUAL, "الأداء المسرحي الفردي"),
    ("Arabic Speech 08", ProgramType.STAGE, ParticipationType.INDIVIDUAL, "الكوميديا الفردية"),
    ("Arabic Essay 09", ProgramType.NON_STAGE, ParticipationType.GROUP, "معرض الفنون الجماعي"),
    ("Arabic Calligraphy 10", ProgramType.NON_STAGE, ParticipationType.GROUP, "مسابقة التصوير الجماعي"),
    ("Arabic Speech 11", ProgramType.NON_STAGE, ParticipationType.INDIVIDUAL, "مسابقة الرسم الفردي"),
    ("Arabic Speech 12", ProgramType.NON_STAGE, ParticipationType.INDIVIDUAL, "مسابقة التصوير الفردي"),
    ("Arabic Speech 13", ProgramType.NON_STAGE, ParticipationType.INDIVIDUAL, "مسابقة الخط العربي"),
    ("Arabic Speech 14", ProgramType.NON_STAGE, ParticipationType.INDIVIDUAL, "مسابقة الكتابة الإبداعية"),
]


def seed_registry(registry: Registry) -> bool:
    """Insert seed teams and programs. Returns False if teams already exist."""
    if registry.list_teams():
        return False

    for name, code in TEAMS:
        registry.create_team(name=name, code=code)
    for name, program_type, participation_type, description in PROGRAMS:
        registry.create_program(
            name=name,
            type=program_type,
            participation_type=participation_type,
            description=description,
        )

    logger.info(f"Seeded {len(TEAMS)} teams and {len(PROGRAMS)} programs")
    return True
