# responsescli/core/ai_client.py
"""
ResponsesCLI API Client
Wrapper for the OpenAI Responses, Files and Vector Stores APIs.
"""

from openai import AsyncOpenAI, NotFoundError, OpenAIError

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Optional

from responsescli.core.errors import ProviderError, ResourceNotFoundError

logger = logging.getLogger(__name__)

FILE_PURPOSE = "user_data"


@asynccontextmanager
async def _sdk_errors(action: str) -> AsyncIterator[None]:
    """Convert SDK exceptions raised inside the block into ProviderError."""
    try:
        yield
    except NotFoundError as e:
        raise ResourceNotFoundError(f"{action}: {e}") from e
    except OpenAIError as e:
        raise ProviderError(f"{action}: {e}") from e


class ResponsesClient:
    """
    Central OpenAI client wrapper for ResponsesCLI.
    All direct SDK calls live here.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        if client is None:
            if not api_key:
                raise ValueError("OpenAI API key is required for ResponsesClient")
            client = AsyncOpenAI(api_key=api_key)
        self.client = client
        logger.info("ResponsesClient initialized")

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------
    async def stream(
        self,
        params: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> AsyncGenerator[Any, None]:
        """
        Open a streamed response and yield its events in order.

        Closing the generator closes the underlying HTTP stream.
        """
        async with _sdk_errors("Stream request failed"):
            stream = await self.client.responses.create(**params, timeout=timeout)
        try:
            async with _sdk_errors("Stream interrupted"):
                async for event in stream:
                    yield event
                    await asyncio.sleep(0)  # Yield control back to the event loop
        finally:
            await stream.close()

    async def create(self, params: Dict[str, Any], timeout: Optional[float] = None) -> Any:
        """Non-streaming request."""
        async with _sdk_errors("Request failed"):
            return await self.client.responses.create(**params, timeout=timeout)

    async def delete_response(self, response_id: str) -> None:
        async with _sdk_errors(f"Failed to delete response {response_id}"):
            await self.client.responses.delete(response_id)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------
    async def list_files(self, purpose: str = FILE_PURPOSE) -> List[Any]:
        async with _sdk_errors("Failed to list files"):
            return [f async for f in self.client.files.list(purpose=purpose)]

    async def upload_file(self, path: Path, purpose: str = FILE_PURPOSE) -> str:
        async with _sdk_errors(f"Failed to upload {path.name}"):
            uploaded = await self.client.files.create(file=path, purpose=purpose)
        logger.info(f"Uploaded {path.name} as {uploaded.id}")
        return uploaded.id

    async def delete_file(self, file_id: str) -> None:
        async with _sdk_errors(f"Failed to delete file {file_id}"):
            await self.client.files.delete(file_id)

    # ------------------------------------------------------------------
    # Vector stores
    # ------------------------------------------------------------------
    async def create_vector_store(self, name: str) -> str:
        async with _sdk_errors("Failed to create vector store"):
            store = await self.client.vector_stores.create(name=name)
        logger.info(f"Created vector store {store.id}")
        return store.id

    async def retrieve_vector_store(self, vector_store_id: str) -> str:
        async with _sdk_errors(f"Failed to retrieve vector store {vector_store_id}"):
            store = await self.client.vector_stores.retrieve(vector_store_id)
        return store.id

    async def delete_vector_store(self, vector_store_id: str) -> None:
        async with _sdk_errors(f"Failed to delete vector store {vector_store_id}"):
            await self.client.vector_stores.delete(vector_store_id)

    async def retrieve_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        async with _sdk_errors(f"Failed to retrieve {file_id} in {vector_store_id}"):
            link = await self.client.vector_stores.files.retrieve(
                file_id, vector_store_id=vector_store_id
            )
        return link.id

    async def create_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        async with _sdk_errors(f"Failed to link {file_id} to {vector_store_id}"):
            link = await self.client.vector_stores.files.create(
                vector_store_id=vector_store_id, file_id=file_id
            )
        return link.id

    async def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> None:
        async with _sdk_errors(f"Failed to unlink {file_id} from {vector_store_id}"):
            await self.client.vector_stores.files.delete(
                file_id, vector_store_id=vector_store_id
            )
