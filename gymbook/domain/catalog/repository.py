"""Catalog repository - Read queries for trainers and services"""

from typing import Optional

from sqlalchemy.orm import Session, contains_eager

from ...models import AvailabilityWindow, Service, ServiceCategory, Trainer, TrainerService


class CatalogRepository:
    """Repository for trainer and service lookups"""

    @staticmethod
    def get_trainers(db: Session) -> list[Trainer]:
        return (
            db.query(Trainer)
            .filter(Trainer.is_active.is_(True))
            .order_by(Trainer.first_name, Trainer.last_name)
            .all()
        )

    @staticmethod
    def get_trainer_by_id(db: Session, trainer_id: int) -> Optional[Trainer]:
        return (
            db.query(Trainer)
            .filter(Trainer.id == trainer_id, Trainer.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_trainers_available_on(db: Session, weekday: int) -> list[Trainer]:
        """Active trainers with at least one switched-on window that weekday, windows preloaded"""
        return (
            db.query(Trainer)
            .join(Trainer.availability)
            .filter(
                Trainer.is_active.is_(True),
                AvailabilityWindow.weekday == weekday,
                AvailabilityWindow.is_available.is_(True),
            )
            .options(contains_eager(Trainer.availability))
            .populate_existing()
            .order_by(Trainer.first_name, Trainer.last_name, AvailabilityWindow.start_time)
            .all()
        )

    @staticmethod
    def get_trainer_services(db: Session, trainer_id: int) -> list[Service]:
        return (
            db.query(Service)
            .join(TrainerService, TrainerService.service_id == Service.id)
            .filter(TrainerService.trainer_id == trainer_id, Service.is_active.is_(True))
            .order_by(Service.name)
            .all()
        )

    @staticmethod
    def get_services(db: Session, category: Optional[ServiceCategory] = None) -> list[Service]:
        query = db.query(Service).filter(Service.is_active.is_(True))
        if category:
            query = query.filter(Service.category == category)
        return query.order_by(Service.name).all()

    @staticmethod
    def search_trainers(db: Session, term: str, limit: int = 5) -> list[Trainer]:
        """Active trainers whose name, surname or specialties contain ``term``"""
        search_term = f"%{term}%"
        return (
            db.query(Trainer)
            .filter(
                Trainer.is_active.is_(True),
                (Trainer.first_name.ilike(search_term))
                | (Trainer.last_name.ilike(search_term))
                | (Trainer.specialties.ilike(search_term)),
            )
            .order_by(Trainer.first_name, Trainer.last_name)
            .limit(limit)
            .all()
        )

    @staticmethod
    def search_services(db: Session, term: str, limit: int = 5) -> list[Service]:
        """Active services whose name or description contain ``term``"""
        search_term = f"%{term}%"
        return (
            db.query(Service)
            .filter(
                Service.is_active.is_(True),
                (Service.name.ilike(search_term)) | (Service.description.ilike(search_term)),
            )
            .order_by(Service.name)
            .limit(limit)
            .all()
        )
