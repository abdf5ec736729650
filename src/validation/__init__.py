from src.validation.celebrity_lookup import CelebrityLookup
from src.validation.validation_cache import ValidationCache
from src.validation.validation_worker import ValidationJob, ValidationWorker

__all__ = ["CelebrityLookup", "ValidationCache", "ValidationJob", "ValidationWorker"]
