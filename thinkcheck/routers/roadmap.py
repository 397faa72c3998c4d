from fastapi import APIRouter, Depends

from thinkcheck.dependencies import get_roadmap_service
from thinkcheck.schemas import PathSuggestionRequest, PathSuggestionResponse, RoadmapRequest, RoadmapResponse
from thinkcheck.services import RoadmapService

router = APIRouter(tags=["roadmap"])


@router.post("/generate-roadmap", response_model=RoadmapResponse)
async def generate_roadmap(request: RoadmapRequest, service: RoadmapService = Depends(get_roadmap_service)):
    """
    Generate a learning roadmap for a topic and timeframe.
    The raw text is returned as-is; `sections` splits it on its headings.
    """
    return await service.generate_roadmap(request)


@router.post("/suggest-paths", response_model=PathSuggestionResponse)
async def suggest_paths(request: PathSuggestionRequest, service: RoadmapService = Depends(get_roadmap_service)):
    return await service.suggest_paths(request)
