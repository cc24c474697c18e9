"""Movie catalog lookup: the external search oracle behind movie selection."""

from filmfess.oracle.client import TmdbSearchClient
from filmfess.oracle.schemas import TmdbMovie, TmdbSearchResponse

__all__ = ["TmdbMovie", "TmdbSearchClient", "TmdbSearchResponse"]
