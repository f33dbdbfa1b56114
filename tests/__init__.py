"""
Test suite for the Practitioner Availability Service.

Contains unit and integration tests for the weekly schedule model, the
editor lifecycle and the availability API.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
