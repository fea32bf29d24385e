from .models import (
    ClientUser,
    WorkerUser,
    User,
    parse_user,
    LoginCredentials,
    RegisterData,
    AuthResult,
    Message,
    ConversationPreview,
)
from .tokens import is_token_expired

__all__ = [
    "ClientUser",
    "WorkerUser",
    "User",
    "parse_user",
    "LoginCredentials",
    "RegisterData",
    "AuthResult",
    "Message",
    "ConversationPreview",
    "is_token_expired",
]
