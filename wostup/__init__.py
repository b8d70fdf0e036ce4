"""
Wostup - recruiting marketplace backend.
Startups post jobs and run interviews; students apply and track their status.

Architecture:
- MongoDB: every collection (accounts, profiles, jobs, applications, interviews)
- FastAPI: REST under /api, WebSocket push at /ws/notifications
- SMTP (fastapi-mail): verification codes and candidate emails
"""

__version__ = "1.0.0"
