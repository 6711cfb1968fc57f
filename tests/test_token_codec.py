import pytest

from cliroute.exceptions import TokenDecodingError
from cliroute.token_codec import (
    MAX_DECODE_PASSES,
    Substitution,
    TokenMap,
    encode,
    program_name,
)


def test_plain_line_is_untouched():
    text, token_map = encode("prog run build", environ={})
    assert text == "prog run build"
    assert len(token_map) == 0
    assert token_map.program == "prog"


def test_quoted_value_becomes_one_token():
    line = 'prog run "hello world"'
    text, token_map = encode(line, environ={})
    assert text == "prog run @tok01@"
    assert token_map("@tok01@") == "hello world"
    assert token_map.restore(text) == line


def test_empty_quotes():
    text, token_map = encode('prog say ""', environ={})
    assert text == "prog say @tok01@"
    assert token_map.decode(text) == "prog say "


def test_environment_reference():
    text, token_map = encode("prog echo %NAME%", environ={"NAME": "world"})
    assert text == "prog echo @tok01@"
    assert token_map.decode(text) == "prog echo world"
    assert token_map.restore(text) == "prog echo %NAME%"


def test_unknown_environment_reference_is_kept():
    text, token_map = encode("prog echo %MISSING%", environ={})
    assert text == "prog echo %MISSING%"
    assert len(token_map) == 0


def test_environment_inside_quotes_decodes_to_fixed_point():
    line = 'prog echo "hi %NAME%"'
    text, token_map = encode(line, environ={"NAME": "world"})
    assert text == "prog echo @tok02@"
    assert token_map.decode(text) == "prog echo hi world"
    assert token_map.restore(text) == line


def test_environment_value_with_spaces_stays_one_token():
    text, token_map = encode("prog open %DIR%", environ={"DIR": "My Documents"})
    assert text.split() == ["prog", "open", "@tok01@"]
    assert token_map.decode(text) == "prog open My Documents"


def test_accessor_is_rewritten_to_dot_form():
    line = "prog cfg --set[region] eu"
    text, token_map = encode(line, environ={})
    assert text == "prog cfg --set.@tok01@ eu"
    assert token_map.decode(text) == "prog cfg --set.region eu"
    assert token_map.restore(text) == line


def test_program_path_is_trimmed():
    text, token_map = encode("/usr/local/bin/tool run", environ={})
    assert token_map.program == "tool"
    assert text == "@tok01@ run"
    assert token_map.decode(text) == "tool run"
    assert token_map.restore(text) == "/usr/local/bin/tool run"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("tool", "tool"),
        ("./bin/tool", "tool"),
        ("C:\\Tools\\tool.exe", "tool.exe"),
    ],
)
def test_program_name(path, expected):
    assert program_name(path) == expected


def test_placeholders_never_collide_with_input():
    line = 'prog echo @tok01@ "x"'
    text, token_map = encode(line, environ={})
    assert text == "prog echo @tok01@ @tok02@"
    assert "@tok01@" not in token_map
    assert token_map.decode(text) == "prog echo @tok01@ x"
    assert token_map.restore(text) == line


def test_placeholders_never_collide_with_environment_values():
    line = 'prog "hello world" %PV%'
    text, token_map = encode(line, environ={"PV": "@tok01@"})
    assert text == "prog @tok02@ @tok03@"
    assert token_map.decode(text) == "prog hello world @tok01@"
    assert token_map.restore(text) == line


def test_substitutions_are_recorded_in_order():
    _, token_map = encode('prog "a" %X%', environ={"X": "1"})
    assert [s.raw for s in token_map.substitutions] == ['"a"', "%X%"]
    assert [s.value for s in token_map.substitutions] == ["a", "1"]


def test_cyclic_table_raises():
    token_map = TokenMap("prog")
    token_map._substitutions["@tok01@"] = Substitution(
        placeholder="@tok01@", marker="@tok01@", raw="x", value="@tok01@!"
    )
    with pytest.raises(TokenDecodingError) as excinfo:
        token_map.decode("@tok01@")
    assert str(MAX_DECODE_PASSES) in str(excinfo.value)
