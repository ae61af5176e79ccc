"""Dialect and keyword lookup routes."""

from deps import APIRouter, HTTPException, List
from fastapi import Request

from ..schemas import DialectOut, KeywordOut

router = APIRouter()


@router.get("/dialects", response_model=List[DialectOut])
def dialects(request: Request) -> List[DialectOut]:
    """Supported source dialects."""
    return request.app.state.porter.dialects()


@router.get("/dialects/{name}", response_model=DialectOut)
def dialect(request: Request, name: str) -> DialectOut:
    """One dialect profile with its conversion checklist."""
    profile = request.app.state.porter.dialect(name)
    if profile is None:
        raise HTTPException(404, f"Unknown source dialect: {name}")
    return profile


@router.get("/keywords/{word}", response_model=KeywordOut)
def keyword(request: Request, word: str) -> KeywordOut:
    """Keyword lookup: reserved?, category, canonical spelling, rename alternatives."""
    return request.app.state.porter.keyword(word)
