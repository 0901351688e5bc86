"""
Test suite for the Hospital Appointment System.

Contains unit and integration tests for booking, availability, status
tracking, storage backends and the HTTP API.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
