# responsescli/core/stores.py
"""
Remote file and vector store bookkeeping.

Each `ensure_*` call checks whether a remote resource still exists and
recreates it if not, so locally cached ids can be trusted afterwards.
"""

import logging
import os
from pathlib import Path

from responsescli.core.ai_client import ResponsesClient
from responsescli.core.errors import ResourceNotFoundError

logger = logging.getLogger(__name__)

VECTOR_STORE_NAME = "Helper for wrapper Assistant"

LINK_CREATED = "created"
LINK_EXISTS = "exists"
DELETED = "deleted"


class FileStoreLinker:
    """Keeps local documents uploaded as `user_data` files."""

    def __init__(self, client: ResponsesClient):
        self.client = client

    async def file_exists(self, file_name: str, file_id: str) -> bool:
        if not file_id:
            return False
        base_name = os.path.basename(file_name)
        for remote in await self.client.list_files():
            if remote.id == file_id and remote.filename == base_name:
                return True
        return False

    async def ensure_file_id(self, file_name: str, file_id: str = "") -> str:
        """
        Return `file_id` if it still refers to an uploaded copy of
        `file_name`, otherwise upload the file and return the new id.
        """
        if await self.file_exists(file_name, file_id):
            logger.debug(f"File {file_id} already uploaded")
            return file_id
        return await self.client.upload_file(Path(file_name))

    async def delete_file(self, file_id: str) -> str:
        await self.client.delete_file(file_id)
        return f"{file_id} deleted"


class VectorStoreLinker:
    """Keeps a vector store alive and files attached to it."""

    def __init__(self, client: ResponsesClient, store_name: str = VECTOR_STORE_NAME):
        self.client = client
        self.store_name = store_name

    async def ensure_vector_store_id(self, vector_store_id: str = "") -> str:
        """
        Return a usable vector store id: `vector_store_id` when it still
        exists, a freshly created store otherwise.

        Raises:
            ProviderError: On any failure other than "not found"
        """
        if not vector_store_id:
            return await self.client.create_vector_store(self.store_name)
        try:
            return await self.client.retrieve_vector_store(vector_store_id)
        except ResourceNotFoundError:
            logger.info(f"Vector store {vector_store_id} not found, creating a new one")
            return await self.client.create_vector_store(self.store_name)

    async def ensure_vector_store_file_id(self, vector_store_id: str, file_id: str) -> str:
        """
        Attach `file_id` to the vector store unless it already is.

        Returns:
            "created" or "exists"
        """
        try:
            await self.client.retrieve_vector_store_file(vector_store_id, file_id)
            return LINK_EXISTS
        except ResourceNotFoundError:
            await self.client.create_vector_store_file(vector_store_id, file_id)
            logger.info(f"Linked {file_id} to {vector_store_id}")
            return LINK_CREATED

    async def delete_vector_store(self, vector_store_id: str) -> str:
        await self.client.delete_vector_store(vector_store_id)
        return DELETED

    async def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        await self.client.delete_vector_store_file(vector_store_id, file_id)
        return DELETED
