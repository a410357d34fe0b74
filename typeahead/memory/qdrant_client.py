import asyncio
import logging

from qdrant_client import AsyncQdrantClient

from qdrant_client.http.models import (
    Distance,
    PayloadSchemaType,
    TextIndexParams,
    TextIndexType,
    TokenizerType,
    VectorParams,
)

from typeahead.config import (
    QDRANT_URL,
    QDRANT_API_KEY,
    QDRANT_COLLECTION,
)

logger = logging.getLogger(__name__)


class QdrantVectorDB:
    """
    Async Qdrant client wrapper.

    Owns collection bootstrap only: the cosine vector space, a keyword
    index on doc_id and a prefix full-text index on the chunk text used
    for literal matching.
    """

    def __init__(self, dim: int, collection: str = QDRANT_COLLECTION, client=None):

        self._dim = dim

        self._client = client or AsyncQdrantClient(
            url=QDRANT_URL,
            api_key=QDRANT_API_KEY,
            timeout=60,
        )

        self._collection = collection

        self._ready = False
        self._lock = None

    @property
    def client(self):
        return self._client

    @property
    def collection(self) -> str:
        return self._collection

    async def ensure_collection(self):
        """Create the collection and payload indexes once per process."""

        if self._ready:
            return

        # created on first use so it binds to the running event loop
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:

            if self._ready:
                return

            if not await self._client.collection_exists(self._collection):

                await self._client.create_collection(
                    collection_name=self._collection,
                    vectors_config=VectorParams(
                        size=self._dim,
                        distance=Distance.COSINE,
                    ),
                )

                logger.info(
                    "Qdrant collection created",
                    extra={"collection": self._collection},
                )

                await self._client.create_payload_index(
                    collection_name=self._collection,
                    field_name="doc_id",
                    field_schema=PayloadSchemaType.KEYWORD,
                )

                await self._client.create_payload_index(
                    collection_name=self._collection,
                    field_name="text",
                    field_schema=TextIndexParams(
                        type=TextIndexType.TEXT,
                        tokenizer=TokenizerType.PREFIX,
                        min_token_len=1,
                        max_token_len=20,
                        lowercase=True,
                    ),
                )

                logger.info(
                    "Payload indexes created",
                    extra={"collection": self._collection},
                )

            self._ready = True
