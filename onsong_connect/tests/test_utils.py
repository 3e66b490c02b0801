"""
Tests de utilidades compartidas
"""

import pytest

from onsong_connect.shared.utils import (
    build_collection_string,
    encode_component,
    ensure_extension,
    generate_token,
    parse_chart_metadata,
    sanitize_filename,
)


def test_generate_token_is_unique_hex():
    tokens = {generate_token() for _ in range(50)}

    assert len(tokens) == 50
    assert all(len(t) == 32 and int(t, 16) >= 0 for t in tokens)


def test_encode_component():
    assert encode_component("amazing grace & love") == "amazing%20grace%20%26%20love"
    assert encode_component("a/b?c=d") == "a%2Fb%3Fc%3Dd"
    assert encode_component("it's (live)!") == "it's%20(live)!"
    assert encode_component(25) == "25"


class TestChartMetadata:
    """Tests del parseo de directivas"""

    def test_full_header(self):
        content = "{title: Amazing Grace}\n{artist: John Newton}\n{key: G}\n{tempo: 72}\n\n[G]Amazing..."
        meta = parse_chart_metadata(content)

        assert (meta.title, meta.artist, meta.key, meta.tempo) == ("Amazing Grace", "John Newton", "G", 72)

    def test_blank_line_stops_parsing(self):
        meta = parse_chart_metadata("{title: Real Title}\n\n{artist: Should Not Be Parsed}")

        assert meta.title == "Real Title"
        assert meta.artist is None

    def test_case_insensitive_and_unknown_directives(self):
        """Test: directivas desconocidas entre llaves no cortan el parseo"""
        meta = parse_chart_metadata("{TITLE: Hola}\n{capo: 2}\n{Artist: Yo}\nVerso")

        assert meta.title == "Hola"
        assert meta.artist == "Yo"

    def test_defaults(self):
        meta = parse_chart_metadata("[C]Solo acordes\n{title: Tarde}")

        assert meta.title == "Untitled"
        assert meta.artist is None and meta.key is None and meta.tempo is None

    def test_non_integer_tempo_is_ignored(self):
        meta = parse_chart_metadata("{title: X}\n{tempo: fast}\n{key: D}")

        assert meta.tempo is None
        assert meta.key == "D"


def test_sanitize_filename():
    assert sanitize_filename('a<b>:c"d/e\\f|g?h*i.cho') == "a_b__c_d_e_f_g_h_i.cho"
    assert sanitize_filename("song...cho") == "song.cho"
    assert len(sanitize_filename("x" * 300)) == 255


def test_ensure_extension():
    assert ensure_extension("song", ".cho") == "song.cho"
    assert ensure_extension("song.onsong", ".cho") == "song.onsong"


@pytest.mark.parametrize("scope,identifier,expected", [
    ("song", "abc-123", "abc-123"),
    ("set", "Domingo", "set:Domingo"),
    ("library", "ignored", "all"),
])
def test_build_collection_string(scope, identifier, expected):
    assert build_collection_string(scope, identifier) == expected


def test_build_collection_string_unknown_scope():
    with pytest.raises(ValueError):
        build_collection_string("book", "x")
