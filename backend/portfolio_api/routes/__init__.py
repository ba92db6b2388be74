"""
Portfolio API — Routes Package
===============================

Route Inventory:
    - projects.py:       GET/POST /api/projects, GET/PUT/DELETE /api/projects/{id}
    - feedback.py:       GET/POST /api/feedback, PUT .../approve, DELETE .../delete
    - hire_requests.py:  GET/POST /api/hire-me
    - uploads.py:        GET /uploads/{path}
    - health.py:         GET /health

Routes stay thin: pull data out of the request, call a service, return the
result. Errors are raised, never formatted here; main.py maps them.
"""
