"""OneDrive provider.

Microsoft Graph addresses drive items by path
(``/me/drive/root:/{path}:/content``), and a PUT to a path creates any
missing parent folders and replaces an existing file in place. Uploads
therefore need no separate folder step or existence check; the explicit
``replace`` conflict behaviour is what keeps repeated syncs from creating
duplicates.
"""

from __future__ import annotations

import asyncio
import json
from urllib.parse import quote

from loguru import logger

from daybook.core.exceptions import APIError, DownloadError, UploadError
from daybook.sync.http import HttpResponse, http_request

from .base import DEFAULT_EXTENSION, DEFAULT_ROOT_FOLDER, RemoteFile, RemoteIdentity, RemoteProvider

GRAPH_API_BASE = "https://graph.microsoft.com/v1.0"


class OneDriveProvider(RemoteProvider):
    """Microsoft Graph (OneDrive) adapter.

    Args:
        credentials: Token cache for the OneDrive connection.
        root_folder: Journal root, relative to the drive root.
        extension: Entry file extension.
        api_base: Graph endpoint.
        transport: Blocking ``(method, url, headers=, data=) -> HttpResponse``.
    """

    name = "onedrive"

    def __init__(
        self,
        credentials,
        root_folder: str = DEFAULT_ROOT_FOLDER,
        extension: str = DEFAULT_EXTENSION,
        api_base: str = GRAPH_API_BASE,
        transport=http_request,
    ):
        super().__init__(credentials, root_folder=root_folder, extension=extension)
        self.api_base = api_base.rstrip("/")
        self._transport = transport

    def _item_url(self, path: str) -> str:
        """Path-addressed item URL, e.g. ``.../root:/Daybook/Journal/2024:``."""
        return f"{self.api_base}/me/drive/root:/{quote(path.strip('/'), safe='/')}:"

    def _children_url(self, folder_path: str) -> str:
        if not folder_path.strip("/"):
            return f"{self.api_base}/me/drive/root/children"
        return f"{self._item_url(folder_path)}/children"

    def _full_path(self, relative_path: str) -> str:
        return f"{self.root_folder}/{relative_path.strip('/')}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        data: bytes | None = None,
        content_type: str | None = None,
    ) -> HttpResponse:
        token = await self.credentials.get_token()
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if content_type:
            headers["Content-Type"] = content_type
        resp = await asyncio.to_thread(self._transport, method, url, headers=headers, data=data)
        if resp.status == 401:
            # Let the next call fetch a new token
            self.credentials.invalidate()
        return resp

    async def _fetch_identity(self) -> RemoteIdentity | None:
        resp = await self._request("GET", f"{self.api_base}/me")
        if not resp.ok:
            return None
        data = resp.json()
        return RemoteIdentity(
            email=data.get("mail") or data.get("userPrincipalName") or "",
            display_name=data.get("displayName") or "",
        )

    async def ensure_folder(self, path: str) -> str:
        """Create each missing component of ``path``; returns the path itself.

        Uploads do not need this (Graph creates parents on PUT), but it lets
        callers materialise the journal root before anything is written.
        """
        parent = ""
        for part in (p for p in path.strip("/").split("/") if p):
            current = f"{parent}/{part}" if parent else part
            lookup = await self._request("GET", self._item_url(current))
            if lookup.status == 404:
                body = json.dumps(
                    {"name": part, "folder": {}, "@microsoft.graph.conflictBehavior": "fail"}
                ).encode("utf-8")
                created = await self._request(
                    "POST", self._children_url(parent), data=body, content_type="application/json"
                )
                # 409: created concurrently by someone else
                if not created.ok and created.status != 409:
                    raise APIError(f"OneDrive folder create for {current} failed: HTTP {created.status}")
                logger.info(f"Created OneDrive folder '{current}'")
            elif not lookup.ok:
                raise APIError(f"OneDrive folder lookup for {current} failed: HTTP {lookup.status}")
            parent = current
        return parent

    async def upload(self, relative_path: str, content: str) -> None:
        self._split(relative_path)
        url = f"{self._item_url(self._full_path(relative_path))}/content?@microsoft.graph.conflictBehavior=replace"
        try:
            resp = await self._request("PUT", url, data=content.encode("utf-8"), content_type="text/plain")
        except APIError as e:
            raise UploadError(f"OneDrive upload of {relative_path} failed: {e}") from e
        if not resp.ok:
            raise UploadError(f"OneDrive upload of {relative_path} failed: HTTP {resp.status}")

    async def download(self, identifier: str) -> str:
        url = f"{self._item_url(self._full_path(identifier))}/content"
        try:
            resp = await self._request("GET", url)
        except APIError as e:
            raise DownloadError(f"Failed to download file: {identifier}: {e}") from e
        if not resp.ok:
            raise DownloadError(f"Failed to download file: {identifier} (HTTP {resp.status})")
        return resp.text

    async def list_journal_files(self) -> list[RemoteFile]:
        await self.credentials.get_token()
        files: list[RemoteFile] = []
        try:
            await self._walk(self.root_folder, files)
        except (APIError, ValueError) as e:
            logger.warning(f"OneDrive listing incomplete after {len(files)} files: {e}")
        return files

    async def _walk(self, folder_path: str, files: list[RemoteFile]) -> None:
        url: str | None = self._children_url(folder_path)
        while url:
            resp = await self._request("GET", url)
            if not resp.ok:
                if resp.status != 404:
                    logger.warning(f"OneDrive listing of {folder_path} stopped: HTTP {resp.status}")
                return
            data = resp.json()
            for item in data.get("value", []):
                item_path = f"{folder_path}/{item['name']}"
                if "folder" in item:
                    await self._walk(item_path, files)
                elif self._is_entry_file(item["name"]):
                    files.append(RemoteFile(path=item_path[len(self.root_folder) + 1 :]))
            url = data.get("@odata.nextLink")

