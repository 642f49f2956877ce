"""
Quote Endpoints.

Memorable lines, attributed to a character and a chapter. Any signed-in user
can submit quotes; only the submitter or a moderator may change them.
Listings are spoiler-gated on the quote's chapter.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Response, status

from usogui_db.core.database.entities.quotes import Quote
from usogui_db.core.database.entities.users import User
from usogui_db.core.database.repositories.characters import CharacterRepository
from usogui_db.core.database.repositories.quotes import QuoteRepository
from usogui_db.core.models.io.common import MessageResponse, Page
from usogui_db.core.models.io.quotes import QuoteCreate, QuoteRead, QuoteUpdate
from usogui_db.server.services.content import get_or_404
from usogui_db.server.services.deps import CurrentUser, ProgressDep, SessionDep
from usogui_db.server.services.pagination import PageDep, paginate
from usogui_db.server.services.spoilers import is_visible

router = APIRouter()


def _ensure_owner(quote: Quote, user: User, action: str) -> None:
    if not (user.is_moderator or quote.submitted_by_id == user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"You can only {action} your own quotes")


@router.get(
    "",
    response_model=Page[QuoteRead],
    summary="List Quotes",
    description="List quotes in chapter order, filtered by character, chapter and text. Spoiler-gated.",
)
async def list_quotes(
    response: Response,
    params: PageDep,
    session: SessionDep,
    progress: ProgressDep,
    search: Optional[str] = None,
    character_id: Optional[int] = None,
    chapter_number: Optional[int] = None,
) -> Page[QuoteRead]:
    quotes, total = await QuoteRepository(session).search(
        query=search,
        character_id=character_id,
        chapter_number=chapter_number,
        progress=progress,
        limit=params.limit,
        offset=params.offset,
    )
    return paginate(response, quotes, total, params, QuoteRead.model_validate)


@router.get(
    "/random",
    response_model=QuoteRead,
    summary="Random Quote",
    description="Return a random visible quote, optionally by one character.",
    responses={404: {"description": "No quotes available"}},
)
async def get_random_quote(
    session: SessionDep, progress: ProgressDep, character_id: Optional[int] = None
) -> QuoteRead:
    quote = await QuoteRepository(session).random(character_id=character_id, progress=progress)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No quotes found")
    return QuoteRead.model_validate(quote)


@router.get(
    "/{quote_id}",
    response_model=QuoteRead,
    summary="Get Quote",
    responses={404: {"description": "Quote not found"}},
)
async def get_quote(quote_id: int, session: SessionDep, progress: ProgressDep) -> QuoteRead:
    quote = await get_or_404(QuoteRepository(session), quote_id, "Quote")
    if not is_visible(quote.chapter_number, progress):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found")
    return QuoteRead.model_validate(quote)


@router.post(
    "",
    response_model=QuoteRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Quote",
    responses={
        201: {"description": "Quote created"},
        404: {"description": "Character not found"},
    },
)
async def create_quote(payload: QuoteCreate, session: SessionDep, user: CurrentUser) -> QuoteRead:
    await get_or_404(CharacterRepository(session), payload.character_id, "Character")
    quote = await QuoteRepository(session).create(Quote(**payload.model_dump(), submitted_by_id=user.id))
    return QuoteRead.model_validate(quote)


@router.patch(
    "/{quote_id}",
    response_model=QuoteRead,
    summary="Update Quote",
    responses={
        403: {"description": "Not the submitter or a moderator"},
        404: {"description": "Quote or character not found"},
    },
)
async def update_quote(quote_id: int, payload: QuoteUpdate, session: SessionDep, user: CurrentUser) -> QuoteRead:
    repository = QuoteRepository(session)
    quote = await get_or_404(repository, quote_id, "Quote")
    _ensure_owner(quote, user, "edit")
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "character_id" in changes:
        await get_or_404(CharacterRepository(session), changes["character_id"], "Character")
    quote = await repository.apply_changes(quote, changes)
    return QuoteRead.model_validate(quote)


@router.delete(
    "/{quote_id}",
    response_model=MessageResponse,
    summary="Delete Quote",
    responses={
        403: {"description": "Not the submitter or a moderator"},
        404: {"description": "Quote not found"},
    },
)
async def delete_quote(quote_id: int, session: SessionDep, user: CurrentUser) -> MessageResponse:
    repository = QuoteRepository(session)
    quote = await get_or_404(repository, quote_id, "Quote")
    _ensure_owner(quote, user, "delete")
    await repository.delete(quote_id)
    return MessageResponse(message="Quote deleted")
