"""
Hospital Appointment System

A FastAPI-based service for booking hospital appointments: doctor roster,
slot availability, conflict-free booking and appointment status tracking.
"""

__version__ = "1.0.0"
