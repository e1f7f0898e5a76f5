"""Read-only lookups over the bundled reference tables."""
from fastapi import APIRouter, HTTPException, Query, Request

from .. import schemas
from ..abjad_engine import AbjadSystem
from ..buruj import BURUJ
from ..config import settings
from ..limiter import limiter
from ..reference_data import get_divine_name, get_surah, load_divine_names, quran_link
from ..resonance import find_divine_names_by_value, nearest_divine_names, nearest_sacred

router = APIRouter(prefix="/v1/reference", tags=["reference"])


def _resolve_system(system: AbjadSystem | None) -> AbjadSystem:
    return system or settings.default_system


@router.get("/divine-names", response_model=list[schemas.DivineNameResponse])
@limiter.limit("60/minute")
def list_divine_names(
    request: Request,
    value: int | None = None,
    tolerance: int = Query(default=0, ge=0, le=1000),
    system: AbjadSystem | None = None,
):
    """All 99 names, or only those within ``tolerance`` of ``value``."""
    system = _resolve_system(system)
    names = load_divine_names() if value is None else find_divine_names_by_value(value, tolerance, system)
    return [schemas.DivineNameResponse(**n.to_dict(system)) for n in names]


@router.get("/divine-names/nearest", response_model=list[schemas.DivineNameMatchResponse])
@limiter.limit("60/minute")
def nearest_names(
    request: Request,
    value: int,
    limit: int = Query(default=3, ge=1, le=99),
    system: AbjadSystem | None = None,
):
    system = _resolve_system(system)
    return [schemas.DivineNameMatchResponse(**m.to_dict()) for m in nearest_divine_names(value, limit, system)]


@router.get("/divine-names/{number}", response_model=schemas.DivineNameResponse)
@limiter.limit("60/minute")
def divine_name(request: Request, number: int, system: AbjadSystem | None = None):
    system = _resolve_system(system)
    name = get_divine_name(number)
    if name is None:
        raise HTTPException(status_code=404, detail="Divine Name not found")
    return schemas.DivineNameResponse(**name.to_dict(system))


@router.get("/surahs/{number}", response_model=schemas.SurahResponse)
@limiter.limit("60/minute")
def surah(request: Request, number: int):
    found = get_surah(number)
    if found is None:
        raise HTTPException(status_code=404, detail="Surah not found")
    return schemas.SurahResponse(**found.to_dict(), link=quran_link(found.number))


@router.get("/buruj/{index}", response_model=schemas.BurjResponse)
@limiter.limit("60/minute")
def burj(request: Request, index: int):
    info = BURUJ.get(index)
    if info is None:
        raise HTTPException(status_code=404, detail="Burj index must be 1-12")
    return schemas.BurjResponse(**info.to_dict())


@router.get("/sacred/{value}", response_model=schemas.SacredResonanceResponse)
@limiter.limit("60/minute")
def sacred(request: Request, value: int):
    return schemas.SacredResonanceResponse(value=value, **nearest_sacred(value).to_dict())
