from fastapi import APIRouter, Depends
from typing import Optional

from ...services.catalog import Catalog
from ..deps import get_catalog

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("")
def list_doctors(
    department: Optional[str] = None,
    catalog: Catalog = Depends(get_catalog),
):
    """List doctors, optionally restricted to one department."""
    doctors = catalog.list_doctors(department)
    return {"success": True, "count": len(doctors), "data": doctors}

@router.get("/{doctor_id}")
def get_doctor(doctor_id: int, catalog: Catalog = Depends(get_catalog)):
    return {"success": True, "data": catalog.get_doctor(doctor_id)}
