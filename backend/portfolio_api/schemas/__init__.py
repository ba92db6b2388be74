"""
Portfolio API — Pydantic Response Schemas
==========================================

What:  The API contract returned to clients.
Why:   Request bodies are checked by the rule tables in validation.py;
       these models shape what goes back out and generate the OpenAPI docs.
"""
