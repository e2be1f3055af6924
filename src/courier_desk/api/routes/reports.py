"""Report endpoints over recorded entries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from ...models.domain import ReportFilters
from ...persistence.store import EntryStore
from ...schemas.entries import CourierEntryModel, ReportEntriesResponse, ReportSummaryModel
from ...services.reports import export_to_csv, filter_entries, report_filename, summarize_entries
from ..dependencies import get_store

router = APIRouter(prefix="/reports", tags=["reports"])


def _report_filters(
  date_from: str | None = Query(default=None, alias="dateFrom", description="Inclusive start day (YYYY-MM-DD)"),
  date_to: str | None = Query(default=None, alias="dateTo", description="Inclusive end day (YYYY-MM-DD)"),
  status_filter: str = Query(default="all", alias="status", description="Entry status or 'all'"),
  search_term: str | None = Query(default=None, alias="searchTerm", description="Case-insensitive search"),
) -> ReportFilters:
  return ReportFilters(
    date_from=date_from or "",
    date_to=date_to or "",
    status=status_filter or "all",
    search_term=search_term or "",
  )


def _filtered(store: EntryStore, filters: ReportFilters):
  try:
    return filter_entries(store.entries, filters)
  except ValueError as exc:
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date filter: {exc}") from exc


@router.get("/entries", response_model=ReportEntriesResponse, status_code=status.HTTP_200_OK)
def get_report_entries(
  filters: ReportFilters = Depends(_report_filters),
  store: EntryStore = Depends(get_store),
) -> ReportEntriesResponse:
  entries = _filtered(store, filters)
  return ReportEntriesResponse(
    items=[CourierEntryModel.model_validate(entry) for entry in entries],
    summary=ReportSummaryModel(**summarize_entries(entries)),
  )


@router.get("/export", status_code=status.HTTP_200_OK)
def export_report(
  filters: ReportFilters = Depends(_report_filters),
  store: EntryStore = Depends(get_store),
) -> Response:
  entries = _filtered(store, filters)
  filename = report_filename()
  return Response(
    content=export_to_csv(entries),
    media_type="text/csv; charset=utf-8",
    headers={"Content-Disposition": f'attachment; filename="{filename}"'},
  )
