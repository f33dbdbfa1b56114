"""
Practitioner Availability Service

A FastAPI-based service for managing a practitioner's recurring weekly
availability and deriving bookable time slots from it.

The server side is ``app.main:app``. Applications that display and edit a
schedule use the client-side API in ``app.services.availability_client``
(``AvailabilityClient``) and ``app.services.availability_editor``
(``AvailabilityEditor``).
"""

__version__ = "1.0.0"
