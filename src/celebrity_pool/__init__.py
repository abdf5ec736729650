from src.celebrity_pool.ingestion import PoolIngestionError, read_celebrity_pool

__all__ = ["PoolIngestionError", "read_celebrity_pool"]
