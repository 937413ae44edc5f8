"""
Services Layer

Stake reservation business logic that:
- Accepts domain inputs (IDs, sessions, contact details)
- Returns domain outputs (models, dataclasses, outcomes)
- Does NOT depend on HTTP request/response objects
- Changes stake status only through guarded conditional updates
"""
