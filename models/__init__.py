# models/__init__.py
from .user import Role, RegisterRequest, LoginRequest, public_user
from .job import JobCreateRequest, BidRequest, job_to_json

__all__ = [
    "Role",
    "RegisterRequest",
    "LoginRequest",
    "public_user",
    "JobCreateRequest",
    "BidRequest",
    "job_to_json",
]
