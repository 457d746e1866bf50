from typing import Any, Dict, List, Union
from pydantic import BaseModel, Field


class AnalysisResponse(BaseModel):
    analysis: str
    status: str = "success"


class SecurityScanRequest(BaseModel):
    analysis: Union[str, Dict[str, Any]] = Field(..., example='{"main_subject": "a stranger at night"}')


class SecurityScanResponse(BaseModel):
    hasSuspiciousActivity: bool
    flags: List[str]
    timestamps: List[Any]
    severity: str
