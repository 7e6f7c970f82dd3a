from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from outlet_pos.dependencies import get_db, outlet_path
from outlet_pos.schemas.report import InventoryReport, SalesReport
from outlet_pos.services.report_service import inventory_report, sales_report

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/{outlet}/sales", response_model=SalesReport)
def get_sales_report(
    outlet: str = Depends(outlet_path),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    return sales_report(db, outlet, start_date, end_date)


@router.get("/{outlet}/inventory", response_model=InventoryReport)
def get_inventory_report(outlet: str = Depends(outlet_path), db: Session = Depends(get_db)):
    return inventory_report(db, outlet)


__all__ = ["router"]
