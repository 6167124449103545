# Infrastructure Review Adapters Package
from .memory import InMemoryReviewRepository
from .yaml_store import YamlReviewRepository

__all__ = ["InMemoryReviewRepository", "YamlReviewRepository"]
