from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import ServiceError


@dataclass
class ClinicContext:
    """Who is calling and which clinic (tenant) the request is working in.

    Built once per request from the bearer token claims. Services receive it
    instead of reading globals, and tenant-scoped repositories filter every
    query by ``current_clinic_id``.
    """

    current_user_id: Optional[int] = None
    current_clinic_id: Optional[int] = None
    current_user_role: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.current_user_role == "SuperAdmin"

    def require_clinic(self) -> int:
        if self.current_clinic_id is None:
            raise ServiceError(
                "CLINIC_CONTEXT_REQUIRED",
                status_code=400,
                message="Select a clinic before working with clinic data",
            )
        return self.current_clinic_id

    def require_user(self) -> int:
        if self.current_user_id is None:
            raise ServiceError("AUTH_UNAUTHORIZED", status_code=401, message="Authentication required")
        return self.current_user_id
