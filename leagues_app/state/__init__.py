"""
Roster state machine module.

Manages roster selections and the submission lifecycle.
Handles transitions between EMPTY → BUILDING → READY_TO_SUBMIT → SUBMITTED.
"""
