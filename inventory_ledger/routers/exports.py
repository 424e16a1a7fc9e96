from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from inventory_ledger.core.dates import date_stamp
from inventory_ledger.dependencies import get_export_service
from inventory_ledger.services.export_service import XLSX_MEDIA_TYPE, ExportService

router = APIRouter(prefix="/exports", tags=["Exports"])


@router.get("/{dataset}")
def export_dataset(
    dataset: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    exports: ExportService = Depends(get_export_service),
):
    content = exports.export_workbook(dataset, start_date=start_date, end_date=end_date)
    filename = "{}-{}.xlsx".format(dataset, date_stamp())
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )
