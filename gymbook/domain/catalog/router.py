"""Catalog router - Public trainer and service lookups"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import ServiceCategory
from .repository import CatalogRepository
from .schemas import (
    AvailableTrainerResponse,
    AvailableTrainersResponse,
    SearchResponse,
    SearchResult,
    ServiceResponse,
    TrainerResponse,
    WindowResponse,
)

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 5

router = APIRouter(tags=["Catalog"])

repo = CatalogRepository()


@router.get("/trainers", response_model=list[TrainerResponse])
async def get_trainers(db: Session = Depends(get_db)):
    return [TrainerResponse.model_validate(t) for t in repo.get_trainers(db)]


@router.get("/trainers/available", response_model=AvailableTrainersResponse)
async def get_available_trainers(
    target_date: date = Query(..., alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    """Trainers who work on the weekday of ``date``, with their open windows"""
    weekday = target_date.weekday()
    logger.info(f"Available trainers requested for {target_date} (weekday {weekday})")
    trainers = repo.get_trainers_available_on(db, weekday)
    payload = [
        AvailableTrainerResponse(
            id=t.id,
            full_name=t.full_name,
            specialties=t.specialties,
            session_fee=t.session_fee,
            windows=[
                WindowResponse(
                    start=w.start_time.strftime("%H:%M"),
                    end=w.end_time.strftime("%H:%M"),
                    note=w.note,
                )
                for w in t.availability
            ],
        )
        for t in trainers
    ]
    return AvailableTrainersResponse(
        date=target_date, weekday=weekday, total=len(payload), trainers=payload
    )


@router.get("/trainers/{trainer_id}", response_model=TrainerResponse)
async def get_trainer(trainer_id: int, db: Session = Depends(get_db)):
    trainer = repo.get_trainer_by_id(db, trainer_id)
    if not trainer:
        raise HTTPException(status_code=404, detail="Trainer not found")
    return TrainerResponse.model_validate(trainer)


@router.get("/trainers/{trainer_id}/services", response_model=list[ServiceResponse])
async def get_trainer_services(trainer_id: int, db: Session = Depends(get_db)):
    """Active services this trainer is assigned to"""
    return [ServiceResponse.model_validate(s) for s in repo.get_trainer_services(db, trainer_id)]


@router.get("/services", response_model=list[ServiceResponse])
async def get_services(
    category: Optional[ServiceCategory] = Query(None),
    db: Session = Depends(get_db),
):
    return [ServiceResponse.model_validate(s) for s in repo.get_services(db, category)]


@router.get("/search", response_model=SearchResponse)
async def search(q: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Quick search over active trainers and services, at most five of each"""
    if not q or not q.strip() or len(q) < SEARCH_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Search term must be at least {SEARCH_MIN_LENGTH} characters",
        )

    trainers = repo.search_trainers(db, q, limit=SEARCH_LIMIT)
    services = repo.search_services(db, q, limit=SEARCH_LIMIT)
    results = [
        SearchResult(type="trainer", id=t.id, title=t.full_name, description=t.specialties or "")
        for t in trainers
    ] + [
        SearchResult(type="service", id=s.id, title=s.name, description=s.description or "")
        for s in services
    ]
    logger.info(f"Search '{q}' matched {len(trainers)} trainers and {len(services)} services")
    return SearchResponse(query=q, total=len(results), results=results)
