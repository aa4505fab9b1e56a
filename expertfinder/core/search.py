from __future__ import annotations

import logging
from typing import List

from ..providers.base import DirectoryProvider, ProfessionalRecord
from .discovery_types import SearchQuery
from .errors import ApiError, DirectoryUnavailable

logger = logging.getLogger(__name__)


class ProximitySearchClient:
    """
    Runs one radius-bounded directory lookup per query.
    Results come back as the directory sent them: no sorting, dedupe or distance maths here.
    """

    def __init__(self, directory: DirectoryProvider):
        self.directory = directory

    async def search(self, query: SearchQuery) -> List[ProfessionalRecord]:
        try:
            records = await self.directory.nearby_professionals(
                query.origin,
                query.radius_km,
                category=query.category,
                sub_category=query.sub_category,
            )
        except DirectoryUnavailable:
            raise
        except ApiError as e:
            logger.error("nearby search failed (status=%s): %s", e.status_code, e)
            raise DirectoryUnavailable(str(e), status_code=e.status_code) from e

        logger.debug(
            "nearby search at (%.5f, %.5f) r=%gkm returned %d professionals",
            query.origin.lat,
            query.origin.lon,
            query.radius_km,
            len(records),
        )
        return records
