"""
Tests de la conversión de servicios mDNS a dispositivos
"""

from onsong_connect.client.discovery import (
    DEFAULT_API_PORT,
    SERVICE_TYPE,
    _decode_txt,
    extract_metadata,
    service_to_device,
)


def test_decode_txt_skips_empty_values():
    txt = _decode_txt({b"model": b"iPad13,4", b"flag": None})
    assert txt == {"model": "iPad13,4"}


def test_extract_metadata():
    meta = extract_metadata({"model": "iPad", "deviceid": "D-1", "version": "2024.1", "role": "server"})

    assert meta.model == "iPad"
    assert meta.deviceId == "D-1"
    assert meta.role == "server"


def test_extract_metadata_ignores_unknown_role():
    assert extract_metadata({"role": "observer"}) is None
    assert extract_metadata({}) is None


def test_service_to_device():
    """Test: nombre de la instancia, host sin punto final y puerto de la API"""
    device = service_to_device(
        f"iPad de Ana.{SERVICE_TYPE}", "ipad-de-ana.local.", ["192.168.1.30"], {}
    )

    assert device.name == "iPad de Ana"
    assert device.host == "ipad-de-ana.local"
    assert device.port == DEFAULT_API_PORT
    assert device.addresses == ["192.168.1.30"]
    assert device.metadata is None


def test_service_to_device_prefers_display_name():
    device = service_to_device(
        f"abc123.{SERVICE_TYPE}", "stage.local.", [], {"displayName": "Escenario", "_d": "otro"}
    )
    assert device.name == "Escenario"
