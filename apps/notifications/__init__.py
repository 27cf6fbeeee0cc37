"""Notifications app package.

Fire-and-forget notifications about booking lifecycle transitions. Domain
events are turned into notification payloads, handed to a Celery task and
stored as in-app notifications for the booker and the venue owner.
Failures are logged and never affect the booking flow.
"""
