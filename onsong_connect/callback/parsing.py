"""
Normalización del body de los callbacks de export.

OnSong puede enviar el resultado como JSON, multipart/form-data o como un
body opaco. Cada variante se normaliza a un ExportCallbackData.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from ..shared.models import ExportCallbackData, ExportFile

_BOUNDARY_RE = re.compile(r"boundary=([^;]+)")
_NAME_RE = re.compile(r'name="([^"]+)"')
_FILENAME_RE = re.compile(r'filename="([^"]+)"')
_CONTENT_TYPE_RE = re.compile(r"Content-Type:\s*([^\r\n]+)")


class CallbackParseError(ValueError):
    """El body del callback no se pudo interpretar"""


def _first_str(obj: Dict[str, Any], keys, default: str) -> str:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return default


@dataclass
class JsonBody:
    body: str

    def normalize(self) -> ExportCallbackData:
        try:
            data = json.loads(self.body)
        except ValueError as e:
            raise CallbackParseError(f"JSON inválido: {e}") from e

        if not isinstance(data, dict):
            raise CallbackParseError("Invalid callback data: expected object")

        if isinstance(data.get("files"), list):
            files: List[ExportFile] = []
            for entry in data["files"]:
                if not isinstance(entry, dict):
                    raise CallbackParseError("Invalid file entry in callback data")
                files.append(ExportFile(
                    name=_first_str(entry, ("name",), "unknown"),
                    content=_first_str(entry, ("content", "data"), ""),
                    content_type=_first_str(entry, ("contentType", "type"), "application/octet-stream"),
                ))
            result = ExportCallbackData(files=files)
            if "metadata" in data:
                result.metadata = data["metadata"]
            return result

        # Atajo de un solo archivo
        if "content" in data or "data" in data:
            return ExportCallbackData(files=[ExportFile(
                name=_first_str(data, ("filename", "name"), "export"),
                content=_first_str(data, ("content", "data"), ""),
                content_type=_first_str(data, ("contentType", "type"), "text/plain"),
            )])

        raise CallbackParseError("Invalid callback data structure")


@dataclass
class MultipartBody:
    body: str
    content_type: str

    def normalize(self) -> ExportCallbackData:
        match = _BOUNDARY_RE.search(self.content_type)
        if match is None:
            raise CallbackParseError("Missing boundary in multipart data")

        boundary = match.group(1)
        parts = [
            part for part in self.body.split(f"--{boundary}")
            if part.strip() not in ("", "--")
        ]

        files: List[ExportFile] = []
        for part in parts:
            header_end = part.find("\r\n\r\n")
            if header_end == -1:
                continue

            headers = part[:header_end]
            content = part[header_end + 4:]
            if content.endswith("\r\n"):
                content = content[:-2]

            filename = _FILENAME_RE.search(headers)
            name = _NAME_RE.search(headers)
            part_type = _CONTENT_TYPE_RE.search(headers)

            files.append(ExportFile(
                name=filename.group(1) if filename else name.group(1) if name else "unknown",
                content=content,
                content_type=part_type.group(1) if part_type else "application/octet-stream",
            ))

        return ExportCallbackData(files=files)


@dataclass
class RawBody:
    body: str
    content_type: Optional[str]

    def normalize(self) -> ExportCallbackData:
        return ExportCallbackData(files=[ExportFile(
            name="export.txt",
            content=self.body,
            content_type=self.content_type or "text/plain",
        )])


CallbackBody = Union[JsonBody, MultipartBody, RawBody]


def select_body(body: str, content_type: Optional[str]) -> CallbackBody:
    """Elige la variante según el Content-Type declarado"""
    if content_type and "application/json" in content_type:
        return JsonBody(body)
    if content_type and "multipart/form-data" in content_type:
        return MultipartBody(body, content_type)
    return RawBody(body, content_type)


def parse_callback_body(body: str, content_type: Optional[str]) -> ExportCallbackData:
    return select_body(body, content_type).normalize()
