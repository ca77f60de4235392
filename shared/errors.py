"""
Shared error handling for metaimport.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""
    
    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class MetaImportError(Exception):
    """Base exception for metaimport."""
    
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
    
    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(MetaImportError):
    """Invalid or unreadable configuration. Fatal at startup."""
    
    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class TemplateRenderError(MetaImportError):
    """A repository template could not be evaluated for a request."""
    
    def __init__(self, message: str = "Template rendering failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("TEMPLATE_RENDER_ERROR", message, details)


class ServiceError(MetaImportError):
    """Service-related errors."""
    
    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)
