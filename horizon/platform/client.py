"""
Horizon Platform Client — Remote access to versioned design-document trees.

Pipeline (per export):
    1. Query the repository kind (svn / git) when the branch needs defaulting
    2. Create a temporary working copy of the requested branch
    3. Open the working copy's model index (modules, folders, documents)
    4. Load units one at a time while the exporter walks the tree
    5. Release the working copy

Uses httpx.AsyncClient — one pooled client per PlatformClient, bearer-token
auth, timeout-aware. Every unit load is awaited by the caller before the next
one is issued.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import httpx
from pydantic import BaseModel, ValidationError

from horizon.engine.errors import HorizonLoadError, HorizonPlatformError, HorizonWorkingCopyError
from horizon.platform.models import Document, Tree, UnitRef

logger = logging.getLogger("horizon.platform.client")

DEFAULT_BRANCH_ALIASES = ("trunk", "main")


class RepositoryInfo(BaseModel):
    type: str = "git"


def needs_default_branch(branch: Optional[str], aliases: Sequence[str] = DEFAULT_BRANCH_ALIASES) -> bool:
    """True when the branch is absent, empty or one of the default-branch aliases."""
    return branch is None or branch == "" or branch in aliases


def derived_app_name(tree_id: str) -> str:
    return f"App-{tree_id}"


class PlatformClient:
    """
    Async client for the design-document platform API.

    Usage:
        async with PlatformClient(base_url, token=token) as client:
            branch = await client.resolve_branch(tree_id, None, {"svn": "trunk", "git": "main"})
            async with await client.create_temporary_working_copy(tree_id, branch) as wc:
                tree = await wc.open_model()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=10.0),
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "PlatformClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # -------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Execute one API call and return the decoded JSON body.

        Raises:
            HorizonPlatformError on transport errors and non-2xx responses.
        """
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HorizonPlatformError(
                f"{method} {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                url=str(e.request.url),
                response_body=e.response.text[:500],
            ) from e
        except httpx.RequestError as e:
            raise HorizonPlatformError(
                f"{method} {path} failed: {e}", url=str(e.request.url)
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HorizonPlatformError(
                f"{method} {path} returned a non-JSON body", url=str(response.url)
            ) from e

    # -------------------------------------------------------------------
    # Repository / working copies
    # -------------------------------------------------------------------

    async def get_repository_info(self, tree_id: str) -> RepositoryInfo:
        body = await self.request("GET", f"/apps/{tree_id}/repository")
        return RepositoryInfo.model_validate(body or {})

    async def resolve_branch(
        self,
        tree_id: str,
        branch: Optional[str],
        default_branches: Dict[str, str],
        aliases: Sequence[str] = DEFAULT_BRANCH_ALIASES,
    ) -> str:
        """
        Concrete branch to check out. Absent, empty and alias branches are
        replaced by the default branch of the repository's versioning system.
        """
        if not needs_default_branch(branch, aliases):
            return branch
        info = await self.get_repository_info(tree_id)
        resolved = default_branches.get(info.type) or default_branches.get("git", "main")
        logger.info(f"Repository {tree_id} is {info.type}; using branch '{resolved}'")
        return resolved

    async def create_temporary_working_copy(self, tree_id: str, branch: str) -> "OnlineWorkingCopy":
        """
        Materialize a temporary working copy of *branch*.

        Raises:
            HorizonWorkingCopyError if the platform refuses or the call fails.
        """
        try:
            body = await self.request(
                "POST", f"/apps/{tree_id}/working-copies", json={"branch": branch}
            )
        except HorizonPlatformError as e:
            raise HorizonWorkingCopyError(
                f"Failed to create new working copy: {e.message}",
                tree_id=tree_id,
                branch=branch,
                app_name=derived_app_name(tree_id),
                status_code=e.status_code,
                url=e.url,
            ) from e

        if not isinstance(body, dict) or not body.get("id"):
            raise HorizonWorkingCopyError(
                "Platform did not return a working copy id",
                tree_id=tree_id,
                branch=branch,
                app_name=derived_app_name(tree_id),
            )
        logger.info(f"Created working copy {body['id']} for {tree_id} ({branch})")
        return OnlineWorkingCopy(self, str(body["id"]), tree_id, branch)


class OnlineWorkingCopy:
    """A temporary working copy held on the platform; also a UnitSource."""

    def __init__(self, client: PlatformClient, working_copy_id: str, tree_id: str, branch: str):
        self._client = client
        self.id = working_copy_id
        self.tree_id = tree_id
        self.branch = branch

    async def __aenter__(self) -> "OnlineWorkingCopy":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.release()
        except HorizonPlatformError as e:
            if exc_type is None:
                raise
            # keep the export failure as the raised error
            logger.warning(f"Failed to release working copy {self.id}: {e.message}")

    async def open_model(self) -> Tree:
        body = await self._client.request("GET", f"/working-copies/{self.id}/model")
        try:
            return Tree.model_validate(body or {})
        except ValidationError as e:
            raise HorizonPlatformError(
                f"Invalid model index for working copy {self.id}: {e}",
                tree_id=self.tree_id,
                branch=self.branch,
            ) from e

    async def load_unit(self, ref: UnitRef) -> Document:
        try:
            body = await self._client.request("GET", f"/working-copies/{self.id}/units/{ref.id}")
        except HorizonPlatformError as e:
            raise HorizonLoadError(
                f"Failed to load unit {ref.id}: {e.message}",
                unit_id=ref.id,
                tree_id=self.tree_id,
                branch=self.branch,
            ) from e
        return Document.from_unit(ref, body)

    async def release(self) -> None:
        await self._client.request("DELETE", f"/working-copies/{self.id}")
        logger.debug(f"Released working copy {self.id}")
