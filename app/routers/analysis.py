from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile

from app.dependencies import get_client_manager
from app.schemas.analysis import AnalysisResponse, SecurityScanRequest, SecurityScanResponse
from app.services.analysis_services import analyze_video, scan_analysis
from vidsentry.client_manager import ClientManager

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post(
    "/analyze-video",
    response_model=AnalysisResponse,
    summary="Analyze an uploaded video",
    description="Upload a video in the `video` form field. Progress is pushed on the /ws/analysis-status channel.",
)
async def analyze_video_route(
    video: Optional[UploadFile] = File(None),
    manager: ClientManager = Depends(get_client_manager),
):
    return await analyze_video(video, manager)


@router.post("/security-scan", response_model=SecurityScanResponse)
async def security_scan_route(data: SecurityScanRequest):
    return await scan_analysis(data.analysis)
