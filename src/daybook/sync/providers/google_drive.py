"""Google Drive provider.

Drive v3 through ``google-api-python-client`` with a bearer token from the
provider's :class:`~daybook.sync.credentials.CredentialCache`. Drive
addresses files by id, so folders are resolved name-by-name under their
parent, and uploads look up an existing file before choosing update or
create. The client is blocking; every request executes in a worker thread.
"""

from __future__ import annotations

import asyncio
import io

import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload
from loguru import logger

from daybook.core.exceptions import DownloadError, UploadError

from .base import DEFAULT_EXTENSION, DEFAULT_ROOT_FOLDER, RemoteFile, RemoteIdentity, RemoteProvider

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
ROOT_FOLDER_ID = "root"

# httplib2 transport failures (DNS, redirects) are not OSErrors
_TRANSFER_ERRORS = (HttpError, OSError, httplib2.HttpLib2Error)


def build_drive_service(token: str):
    """Return a Drive v3 service resource authorised with a bearer token."""
    return build("drive", "v3", credentials=Credentials(token=token), cache_discovery=False)


def _quote(value: str) -> str:
    """Escape a value for a Drive ``q`` string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveProvider(RemoteProvider):
    """Google Drive v3 adapter.

    Args:
        credentials: Token cache for the Drive connection.
        root_folder: Journal root, created under "My Drive" on first use.
        extension: Entry file extension.
        service_factory: ``token -> service``; defaults to :func:`build_drive_service`.
    """

    name = "google_drive"

    def __init__(
        self,
        credentials,
        root_folder: str = DEFAULT_ROOT_FOLDER,
        extension: str = DEFAULT_EXTENSION,
        service_factory=None,
    ):
        super().__init__(credentials, root_folder=root_folder, extension=extension)
        self._service_factory = service_factory or build_drive_service
        self._service = None
        self._service_token: str | None = None
        self._folder_ids: dict[str, str] = {}

    async def _get_service(self):
        token = await self.credentials.get_token()
        if self._service is None or token != self._service_token:
            self._service = self._service_factory(token)
            self._service_token = token
        return self._service

    @staticmethod
    async def _execute(request):
        return await asyncio.to_thread(request.execute)

    async def _fetch_identity(self) -> RemoteIdentity | None:
        service = await self._get_service()
        about = await self._execute(service.about().get(fields="user"))
        user = about.get("user") or {}
        return RemoteIdentity(
            email=user.get("emailAddress", ""),
            display_name=user.get("displayName", ""),
        )

    # -- folders ------------------------------------------------------------

    async def _find_folder(self, service, name: str, parent_id: str) -> str | None:
        query = (
            f"name='{_quote(name)}' and mimeType='{FOLDER_MIME_TYPE}' "
            f"and '{parent_id}' in parents and trashed=false"
        )
        result = await self._execute(service.files().list(q=query, spaces="drive", fields="files(id, name)"))
        files = result.get("files", [])
        return files[0]["id"] if files else None

    async def _find_or_create_folder(self, service, name: str, parent_id: str) -> str:
        folder_id = await self._find_folder(service, name, parent_id)
        if folder_id:
            return folder_id

        body = {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
        created = await self._execute(service.files().create(body=body, fields="id"))
        logger.info(f"Created Google Drive folder '{name}'")
        return created["id"]

    async def ensure_folder(self, path: str) -> str:
        """Resolve ``a/b/c`` to a folder id, creating missing components."""
        service = await self._get_service()
        parent_id = ROOT_FOLDER_ID
        walked: list[str] = []
        for part in (p for p in path.strip("/").split("/") if p):
            walked.append(part)
            key = "/".join(walked)
            folder_id = self._folder_ids.get(key)
            if folder_id is None:
                folder_id = await self._find_or_create_folder(service, part, parent_id)
                self._folder_ids[key] = folder_id
            parent_id = folder_id
        return parent_id

    # -- files --------------------------------------------------------------

    async def _find_file(self, service, name: str, folder_id: str) -> str | None:
        query = (
            f"name='{_quote(name)}' and '{folder_id}' in parents "
            f"and mimeType!='{FOLDER_MIME_TYPE}' and trashed=false"
        )
        result = await self._execute(service.files().list(q=query, spaces="drive", fields="files(id)"))
        files = result.get("files", [])
        return files[0]["id"] if files else None

    async def upload(self, relative_path: str, content: str) -> None:
        folders, file_name = self._split(relative_path)
        service = await self._get_service()
        try:
            folder_id = await self.ensure_folder("/".join([self.root_folder, *folders]))
            existing_id = await self._find_file(service, file_name, folder_id)
            media = MediaIoBaseUpload(io.BytesIO(content.encode("utf-8")), mimetype="text/plain")
            if existing_id:
                request = service.files().update(fileId=existing_id, media_body=media)
            else:
                body = {"name": file_name, "parents": [folder_id]}
                request = service.files().create(body=body, media_body=media, fields="id")
            await self._execute(request)
        except _TRANSFER_ERRORS as e:
            # Folder ids may be stale if the tree changed remotely
            self._folder_ids.clear()
            raise UploadError(f"Google Drive upload of {relative_path} failed: {e}") from e

    async def download(self, identifier: str) -> str:
        service = await self._get_service()
        try:
            data = await self._execute(service.files().get_media(fileId=identifier))
        except _TRANSFER_ERRORS as e:
            raise DownloadError(f"Google Drive download of {identifier} failed: {e}") from e
        return data.decode("utf-8") if isinstance(data, bytes) else str(data)

    async def list_journal_files(self) -> list[RemoteFile]:
        service = await self._get_service()
        files: list[RemoteFile] = []
        try:
            root_id = await self.ensure_folder(self.root_folder)
            await self._walk(service, root_id, "", files)
        except _TRANSFER_ERRORS as e:
            logger.warning(f"Google Drive listing incomplete after {len(files)} files: {e}")
        return files

    async def _walk(self, service, folder_id: str, current_path: str, files: list[RemoteFile]) -> None:
        page_token = None
        while True:
            result = await self._execute(
                service.files().list(
                    q=f"'{folder_id}' in parents and trashed=false",
                    spaces="drive",
                    fields="nextPageToken, files(id, name, mimeType)",
                    pageToken=page_token,
                )
            )
            for item in result.get("files", []):
                item_path = f"{current_path}/{item['name']}" if current_path else item["name"]
                if item.get("mimeType") == FOLDER_MIME_TYPE:
                    await self._walk(service, item["id"], item_path, files)
                elif self._is_entry_file(item["name"]):
                    files.append(RemoteFile(path=item_path, file_id=item["id"]))

            page_token = result.get("nextPageToken")
            if not page_token:
                break
