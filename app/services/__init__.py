"""
Services layer - triage business logic.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- The triage workspace is the only owner of in-memory state
- Model and store failures propagate; the HTTP layer decides what to show
"""
