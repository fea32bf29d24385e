from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["client", "worker"]
Availability = Literal["available", "busy", "offline"]


class WireModel(BaseModel):
    """camelCase on the wire and in storage; snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Identity ----------------------------------------------------------------

class BaseUser(WireModel):
    id: str
    name: str
    email: str
    avatar: str = ""
    phone: Optional[str] = None
    location: str = ""
    created_at: str = ""


class ClientUser(BaseUser):
    role: Literal["client"] = "client"
    company: Optional[str] = None
    jobs_posted: int = 0
    total_spent: float = 0


class WorkerUser(BaseUser):
    role: Literal["worker"] = "worker"
    skills: list[str] = []
    category: str = "General"
    experience: int = 0
    hourly_rate: float = 0
    rating: float = 0
    total_jobs: int = 0
    availability: Availability = "available"
    bio: str = ""
    certifications: list[str] = []


User = Annotated[Union[ClientUser, WorkerUser], Field(discriminator="role")]
USER_ADAPTER: TypeAdapter = TypeAdapter(User)


def parse_user(data: Any) -> Union[ClientUser, WorkerUser]:
    """Validate a user record; the legacy ``type`` key stands in for ``role``."""
    if isinstance(data, (ClientUser, WorkerUser)):
        return data
    if isinstance(data, dict) and "role" not in data and "type" in data:
        data = {**data, "role": data["type"]}
    return USER_ADAPTER.validate_python(data)


# --- Auth payloads -----------------------------------------------------------

class LoginCredentials(BaseModel):
    email: str
    password: str
    role: Optional[Role] = None


class RegisterData(BaseModel):
    full_name: str
    email: str
    password: str
    phone: str = ""
    role: Role
    location: str = ""
    company: Optional[str] = None

    # worker-only
    primary_category: Optional[str] = None
    skills: list[str] = []
    experience: Optional[int] = None
    hourly_rate: Optional[float] = None
    bio: Optional[str] = None
    certifications: list[str] = []
    availability: Optional[Availability] = None


class AuthResult(BaseModel):
    user: User
    access: str
    refresh: str


class Envelope(BaseModel):
    data: Any = None
    success: bool
    message: Optional[str] = None


# --- Messaging ---------------------------------------------------------------

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(WireModel):
    id: str
    sender_id: str
    receiver_id: str = Field(
        validation_alias=AliasChoices("receiverId", "recipientId", "receiver_id"),
        serialization_alias="receiverId",
    )
    job_id: Optional[str] = None
    content: str
    timestamp: datetime = Field(
        default_factory=utcnow,
        validation_alias=AliasChoices("timestamp", "createdAt"),
        serialization_alias="timestamp",
    )
    read: bool = Field(
        default=False,
        validation_alias=AliasChoices("read", "isRead"),
        serialization_alias="read",
    )

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def other_party(self, user_id: str) -> Optional[str]:
        if self.sender_id == user_id:
            return self.receiver_id
        if self.receiver_id == user_id:
            return self.sender_id
        return None


class ConversationPreview(WireModel):
    user: User
    last_message: Optional[Message] = None
    unread_count: int = 0


# --- Marketplace records -----------------------------------------------------

JobStatus = Literal["open", "in_progress", "completed", "cancelled"]
ApplicationStatus = Literal["pending", "accepted", "rejected"]


class Job(WireModel):
    id: str
    title: str
    description: str = ""
    category: str = ""
    location: str = ""
    budget: float = 0
    duration: str = ""
    client_id: str
    status: JobStatus = "open"
    skills: list[str] = []
    created_at: str = ""
    updated_at: str = ""
    deadline: Optional[str] = None


class Application(WireModel):
    id: str
    job_id: str
    worker_id: str
    message: str = ""
    proposed_rate: float = 0
    status: ApplicationStatus = "pending"
    created_at: str = ""
    updated_at: str = ""


class Category(WireModel):
    id: str
    name: str
    icon: str = ""
    description: str = ""


__all__ = [
    "Role",
    "Availability",
    "WireModel",
    "BaseUser",
    "ClientUser",
    "WorkerUser",
    "User",
    "USER_ADAPTER",
    "parse_user",
    "LoginCredentials",
    "RegisterData",
    "AuthResult",
    "Envelope",
    "Message",
    "ConversationPreview",
    "Job",
    "Application",
    "Category",
    "utcnow",
]
