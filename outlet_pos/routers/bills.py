from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from outlet_pos.dependencies import get_db, outlet_path
from outlet_pos.schemas.bill import BillCreate, BillRead
from outlet_pos.services import billing_service

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.post("", response_model=BillRead, status_code=status.HTTP_201_CREATED)
def create_bill(payload: BillCreate, db: Session = Depends(get_db)):
    return billing_service.create_bill(
        db,
        payload.outlet,
        payload.items,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        discount=payload.discount,
        payment_method=payload.payment_method,
    )


@router.get("/{outlet}", response_model=List[BillRead])
def list_bills(outlet: str = Depends(outlet_path), db: Session = Depends(get_db)):
    return billing_service.list_bills(db, outlet)


@router.get("/{outlet}/{bill_id}", response_model=BillRead)
def get_bill(
    bill_id: int,
    outlet: str = Depends(outlet_path),
    db: Session = Depends(get_db),
):
    return billing_service.get_bill(db, outlet, bill_id)


__all__ = ["router"]
