from __future__ import annotations

import base64
import json

import pytest

from sidingconfig.artifact import (
    MODULE_PREFIX,
    MODULE_SUFFIX,
    ArtifactFormatError,
    decode_content,
    encode_content,
    parse_module,
    render_module,
)
from sidingconfig.models import default_configuration
from sidingconfig.store import add_material, update_material_rate


def test_render_module_exact_shape() -> None:
    config = default_configuration()
    expected = (
        "const calculatorConfig = "
        + json.dumps(config.to_json_dict(), indent=2)
        + ";\n\nexport default calculatorConfig;"
    )
    assert render_module(config) == expected


def test_render_module_keeps_integer_literals() -> None:
    text = render_module(default_configuration())
    assert text.startswith('const calculatorConfig = {\n  "materialRates": {\n    "vinyl": {\n      "buildingsPerDay": 6,')
    assert '"timeMultiplier": 0.6' in text
    assert '"priceMultiplier": 1.67' in text
    assert '"2": {\n      "timeMultiplier": 1,' in text


def test_parse_module_round_trip() -> None:
    config = add_material(default_configuration(), "metal")
    assert parse_module(render_module(config)) == config


def test_parse_module_tolerates_trailing_newline() -> None:
    config = default_configuration()
    assert parse_module(render_module(config) + "\n") == config


@pytest.mark.parametrize(
    "text",
    [
        "export default {};",
        MODULE_PREFIX + "{}",
        MODULE_PREFIX + "{not json" + MODULE_SUFFIX,
        MODULE_PREFIX + '{"materialRates": {}}' + MODULE_SUFFIX,
    ],
)
def test_parse_module_rejects_malformed_text(text: str) -> None:
    with pytest.raises(ArtifactFormatError):
        parse_module(text)


def test_encode_content_is_utf8_base64() -> None:
    text = "Fibre-ciment é « cedar »"
    encoded = encode_content(text)
    assert base64.b64decode(encoded).decode("utf-8") == text
    assert encoded.isascii()


def test_non_ascii_description_survives_transport() -> None:
    config = update_material_rate(default_configuration(), "hardie", "description", "Façade élégante")
    encoded = encode_content(render_module(config))
    assert parse_module(decode_content(encoded)) == config


def test_decode_content_accepts_wrapped_lines() -> None:
    encoded = encode_content("x" * 200)
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    assert decode_content(wrapped) == "x" * 200


def test_decode_content_rejects_garbage() -> None:
    with pytest.raises(ArtifactFormatError):
        decode_content("not base64!!")
