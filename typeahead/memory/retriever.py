# typeahead/memory/retriever.py
from typing import List, Optional

from typeahead.models import RetrievedChunk


async def retrieve(
    text: str,
    similarity_threshold: float,
    max_count: int,
    literal_query: Optional[str] = None,
    *,
    embedder,
    store,
) -> List[RetrievedChunk]:
    """
    Retrieve the chunks nearest to text.

    Args:
        text: Text typed so far (embedded as the query)
        similarity_threshold: Minimum cosine score for semantic hits
        max_count: Number of chunks to return
        literal_query: Optional partial word; chunks containing it come
            back as literal hits
        embedder: Embedder instance to generate the query embedding
        store: VectorStore instance to search

    Returns:
        RetrievedChunk list ordered by descending raw similarity

    Raises:
        Whatever the embedder or store raise; callers degrade on failure
    """
    query_embedding = await embedder.embed(text)

    return await store.search(
        vector=query_embedding,
        similarity_threshold=similarity_threshold,
        max_count=max_count,
        literal_query=literal_query,
    )
