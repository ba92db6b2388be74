"""
Portfolio API — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database handle.
Why:   Routes handle HTTP; services handle rules and persistence, and can be
       tested without HTTP overhead.

Service Inventory:
    - FileService:        Image upload validation, storage and cleanup
    - ProjectService:     Project CRUD with sequential ids
    - FeedbackService:    Feedback create/list/approve/delete
    - HireRequestService: Hire-me request create/list
"""
