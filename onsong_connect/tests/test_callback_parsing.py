"""
Tests de la normalización del body de los callbacks
"""

import json

import pytest

from onsong_connect.callback.parsing import (
    CallbackParseError,
    JsonBody,
    MultipartBody,
    RawBody,
    parse_callback_body,
    select_body,
)


def test_select_body_by_content_type():
    assert isinstance(select_body("{}", "application/json; charset=utf-8"), JsonBody)
    assert isinstance(select_body("", "multipart/form-data; boundary=x"), MultipartBody)
    assert isinstance(select_body("hola", "text/plain"), RawBody)
    assert isinstance(select_body("hola", None), RawBody)


class TestJson:
    """Tests del body JSON"""

    def test_files_array(self):
        """Test: los campos del array de archivos se conservan tal cual"""
        body = json.dumps({
            "files": [
                {"name": "a.cho", "content": "{title: A}", "contentType": "text/plain"},
                {"name": "b.pdf", "data": "JVBERg==", "type": "application/pdf;base64"},
            ],
            "metadata": {"count": 2},
        })

        result = parse_callback_body(body, "application/json")

        assert [f.name for f in result.files] == ["a.cho", "b.pdf"]
        assert result.files[0].content == "{title: A}"
        assert result.files[0].content_type == "text/plain"
        assert result.files[1].content == "JVBERg=="
        assert result.files[1].content_type == "application/pdf;base64"
        assert result.metadata == {"count": 2}

    def test_files_array_defaults(self):
        result = parse_callback_body(json.dumps({"files": [{}]}), "application/json")

        file = result.files[0]
        assert (file.name, file.content, file.content_type) == ("unknown", "", "application/octet-stream")
        assert result.metadata is None

    def test_single_file_shorthand(self):
        body = json.dumps({"filename": "Amazing Grace.onsong", "content": "{title: Amazing Grace}"})

        result = parse_callback_body(body, "application/json")

        assert len(result.files) == 1
        assert result.files[0].name == "Amazing Grace.onsong"
        assert result.files[0].content_type == "text/plain"

    def test_single_file_default_name(self):
        result = parse_callback_body(json.dumps({"data": "x"}), "application/json")
        assert result.files[0].name == "export"

    @pytest.mark.parametrize("body", ["{not json", "[1, 2]", json.dumps({"status": "ok"})])
    def test_invalid_json_shapes(self, body):
        with pytest.raises(CallbackParseError):
            parse_callback_body(body, "application/json")


class TestMultipart:
    """Tests del body multipart/form-data"""

    BODY = (
        "--XyZ\r\n"
        'Content-Disposition: form-data; name="file"; filename="song.cho"\r\n'
        "Content-Type: text/plain\r\n"
        "\r\n"
        "{title: Song}\r\n"
        "--XyZ\r\n"
        'Content-Disposition: form-data; name="notes"\r\n'
        "\r\n"
        "hola\r\n"
        "--XyZ--\r\n"
    )

    def test_parts(self):
        result = parse_callback_body(self.BODY, "multipart/form-data; boundary=XyZ")

        assert len(result.files) == 2
        assert result.files[0].name == "song.cho"
        assert result.files[0].content == "{title: Song}"
        assert result.files[0].content_type == "text/plain"
        assert result.files[1].name == "notes"
        assert result.files[1].content == "hola"
        assert result.files[1].content_type == "application/octet-stream"

    def test_part_without_headers_is_skipped(self):
        body = "--B\r\nsolo texto sin cabeceras\r\n--B--\r\n"
        result = parse_callback_body(body, "multipart/form-data; boundary=B")
        assert result.files == []

    def test_missing_boundary(self):
        with pytest.raises(CallbackParseError):
            parse_callback_body(self.BODY, "multipart/form-data")


def test_raw_body():
    """Test: cualquier otro content type es un único export.txt"""
    result = parse_callback_body("contenido opaco", "application/octet-stream")

    assert len(result.files) == 1
    assert result.files[0].name == "export.txt"
    assert result.files[0].content == "contenido opaco"
    assert result.files[0].content_type == "application/octet-stream"

    assert parse_callback_body("x", None).files[0].content_type == "text/plain"
