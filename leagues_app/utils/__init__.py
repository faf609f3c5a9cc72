"""
Utility functions module.

Time Semantics:
- All stored and compared timestamps are aware UTC datetimes
- Feed timestamps may arrive as epoch seconds, epoch milliseconds or ISO-8601
- Submission times come from the controller's injectable clock
"""
