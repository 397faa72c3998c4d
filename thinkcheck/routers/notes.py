from fastapi import APIRouter, Depends

from thinkcheck.dependencies import get_notes_service
from thinkcheck.schemas import NotesRequest, NotesResponse
from thinkcheck.services import NotesService

router = APIRouter(tags=["notes"])


@router.post("/notes", response_model=NotesResponse)
async def generate_notes(request: NotesRequest, service: NotesService = Depends(get_notes_service)):
    """Generate study notes split into at most 10 titled sections."""
    return await service.generate_notes(request)
