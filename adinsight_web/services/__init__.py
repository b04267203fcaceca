from .admin_auth import AdminAuthenticator, SharedSecretAuthenticator
from .analysis_service import AnalysisService
from .session_controller import SessionController, SessionRegistry

__all__ = [
    "AdminAuthenticator",
    "AnalysisService",
    "SessionController",
    "SessionRegistry",
    "SharedSecretAuthenticator",
]
