from fastapi import APIRouter, Depends

from interview_ace.core.dependencies import get_client_key, get_session_repository
from interview_ace.services.navigation import Page, resolve_page
from interview_ace.services.session_repository import SessionRepository

router = APIRouter()


@router.get("/{page}")
async def navigate(
    page: Page,
    client_key: str = Depends(get_client_key),
    repository: SessionRepository = Depends(get_session_repository),
):
    session = repository.get(client_key) if client_key else None
    resolved = resolve_page(page, session)
    return {"requested": page.value, "page": resolved.value, "redirected": resolved != page}
