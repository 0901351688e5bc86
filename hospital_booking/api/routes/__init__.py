from fastapi import APIRouter

from . import appointments, availability, doctors, system

api_router = APIRouter(prefix="/api")
api_router.include_router(system.router)
api_router.include_router(doctors.router)
api_router.include_router(appointments.router)
api_router.include_router(availability.router)
