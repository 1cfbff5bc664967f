"""
Application package for the Bakery Reservation API.

``core`` holds configuration, database access, authentication and
domain errors, ``schemas`` the pydantic request and response models,
``services`` the reservation logic and its collaborators, and
``api/v1`` the HTTP routes.
"""
