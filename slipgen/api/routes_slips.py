from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from slipgen.api.deps import get_db, require_operator
from slipgen.api.schemas import SlipCreateRequest, SlipResponse, SlipUpdateRequest
from slipgen.core.enums import SlipStatus
from slipgen.db import crud

router = APIRouter(prefix="/slips", tags=["slips"])


@router.get("", response_model=list[SlipResponse])
def list_slips(
    status_filter: SlipStatus | None = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    operator: str = Depends(require_operator),
):
    del operator
    return crud.list_slips(db, status=status_filter, limit=limit)


@router.post("", response_model=SlipResponse, status_code=status.HTTP_201_CREATED)
def create_slip(
    payload: SlipCreateRequest,
    db: Session = Depends(get_db),
    operator: str = Depends(require_operator),
):
    del operator
    slip = crud.create_slip(db, fields=payload.model_dump())
    db.commit()
    return slip


@router.get("/{slip_id}", response_model=SlipResponse)
def get_slip(
    slip_id: str,
    db: Session = Depends(get_db),
    operator: str = Depends(require_operator),
):
    del operator
    slip = crud.get_slip(db, slip_id)
    if not slip:
        raise HTTPException(status_code=404, detail="Slip not found")
    return slip


@router.put("/{slip_id}", response_model=SlipResponse)
def update_slip(
    slip_id: str,
    payload: SlipUpdateRequest,
    db: Session = Depends(get_db),
    operator: str = Depends(require_operator),
):
    del operator
    slip = crud.get_slip(db, slip_id)
    if not slip:
        raise HTTPException(status_code=404, detail="Slip not found")
    if slip.status == SlipStatus.PROCESSING:
        raise HTTPException(status_code=409, detail="Slip is being processed")
    fields = payload.model_dump(exclude_unset=True)
    passport = fields.get("passport", slip.passport)
    confirm = fields.get("confirm_passport", slip.confirm_passport)
    if passport and confirm and passport != confirm:
        raise HTTPException(status_code=422, detail="Passport numbers do not match")
    crud.update_slip_fields(db, slip, fields=fields)
    db.commit()
    return slip


@router.delete("/{slip_id}")
def delete_slip(
    slip_id: str,
    db: Session = Depends(get_db),
    operator: str = Depends(require_operator),
):
    del operator
    slip = crud.get_slip(db, slip_id)
    if not slip:
        raise HTTPException(status_code=404, detail="Slip not found")
    if slip.status == SlipStatus.PROCESSING:
        raise HTTPException(status_code=409, detail="Slip is being processed")
    crud.delete_slip(db, slip)
    db.commit()
    return {"success": True}
