"""Reports router - participant summary and flat exports of all registrations."""

from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import Response, StreamingResponse

from artsfest.common.exporter import rows_to_csv, rows_to_xlsx_stream, to_json
from artsfest.registration import reports
from artsfest.registration.registry import Registry, get_registry
from artsfest.registration.service import RegistrationWorkflow

router = APIRouter()


def _export_name(extension: str) -> str:
    return f"Arts_Fest_Data_{date.today().isoformat()}.{extension}"


@router.get("/participant/{code}")
def participant_report(code: str, registry: Registry = Depends(get_registry)):
    workflow = RegistrationWorkflow(registry)
    return reports.participant_report(workflow.lookup_by_code(code))


@router.get("/export/csv")
def export_csv(registry: Registry = Depends(get_registry)):
    rows = reports.export_rows(registry.resolve_registrations_with_details())
    return Response(
        content=rows_to_csv(reports.EXPORT_HEADERS, rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={_export_name('csv')}"},
    )


@router.get("/export/json")
def export_json(registry: Registry = Depends(get_registry)):
    document = reports.export_document(registry.resolve_registrations_with_details())
    return Response(
        content=to_json(document),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={_export_name('json')}"},
    )


@router.get("/export/xlsx")
def export_xlsx(registry: Registry = Depends(get_registry)):
    rows = reports.export_rows(registry.resolve_registrations_with_details())
    excel_file = rows_to_xlsx_stream(reports.EXPORT_HEADERS, rows, title="Registrations")
    return StreamingResponse(
        excel_file,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={_export_name('xlsx')}"},
    )
