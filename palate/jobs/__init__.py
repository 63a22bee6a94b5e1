from .embeddings import backfill_dish_embeddings_job, generate_dish_embedding_job
from .profiles import recompute_profile_job

__all__ = [
    "backfill_dish_embeddings_job",
    "generate_dish_embedding_job",
    "recompute_profile_job",
]
