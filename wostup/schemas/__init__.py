"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in schemas.py; import from there:
    from wostup.schemas.schemas import SignupRequest, ApiResponse
"""
