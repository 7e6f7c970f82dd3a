from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from outlet_pos.dependencies import ensure_same_outlet, get_db, outlet_path
from outlet_pos.schemas.product import ProductCreate, ProductRead, ProductUpdate, QuantityUpdate
from outlet_pos.services import inventory_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("/{outlet}", response_model=List[ProductRead])
def list_products(outlet: str = Depends(outlet_path), db: Session = Depends(get_db)):
    return inventory_service.list_active(db, outlet)


@router.get("/{outlet}/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    outlet: str = Depends(outlet_path),
    db: Session = Depends(get_db),
):
    return inventory_service.find_by_id(db, outlet, product_id)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    values = payload.model_dump(exclude={"outlet"})
    return inventory_service.create_product(db, payload.outlet, values)


@router.put("/{outlet}/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    outlet: str = Depends(outlet_path),
    db: Session = Depends(get_db),
):
    ensure_same_outlet(outlet, payload.outlet)
    values = payload.model_dump(exclude={"outlet"})
    return inventory_service.update_product(db, outlet, product_id, values)


@router.put("/{outlet}/{product_id}/quantity", response_model=ProductRead)
def update_quantity(
    product_id: int,
    payload: QuantityUpdate,
    outlet: str = Depends(outlet_path),
    db: Session = Depends(get_db),
):
    return inventory_service.adjust_quantity(
        db, outlet, product_id, payload.quantity, mode=payload.mode
    )


@router.delete("/{outlet}/{product_id}")
def delete_product(
    product_id: int,
    outlet: str = Depends(outlet_path),
    db: Session = Depends(get_db),
):
    inventory_service.deactivate_product(db, outlet, product_id)
    return {"message": "Product deleted successfully"}


__all__ = ["router"]
