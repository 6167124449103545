"""
Review Service Factory
Centralizes wiring the service to its storage adapter from configuration.
"""

from mnemo.application.config import AppConfig
from mnemo.application.review.service import ReviewService
from mnemo.application.scheduler import Scheduler
from mnemo.domain.review.ports import ReviewRepository
from mnemo.infrastructure.adapters.yaml_store import YamlReviewRepository


def get_review_repository(config: AppConfig) -> ReviewRepository:
    """
    Returns the snapshot-file repository at the configured store path.
    """
    return YamlReviewRepository(config.store_path)


def get_review_service(config: AppConfig, scheduler: Scheduler | None = None) -> ReviewService:
    """
    Returns a ReviewService using the configured repository and due-queue limits.
    """
    return ReviewService(
        get_review_repository(config),
        scheduler=scheduler,
        default_limit=config.default_due_limit,
        max_limit=config.max_due_limit,
    )
