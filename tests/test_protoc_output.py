from types import SimpleNamespace

import pytest

from prototool.protoc_output import (
    ProtocCommand,
    best_file_path,
    display_file_path,
    parse_protoc_line,
    parse_protoc_output,
)
from prototool.settings import CompileConfig, Config
from prototool.text import Failure


def _file(display_path):
    return SimpleNamespace(display_path=display_path, path="/abs/" + display_path)


def _command(allow_unused_imports=False, files=("dir/a.proto",)):
    config = Config(compile=CompileConfig(allow_unused_imports=allow_unused_imports))
    return ProtocCommand(
        args=["protoc", "-I", "dir", "dir/a.proto"],
        proto_set=SimpleNamespace(config=config),
        proto_files=[_file(f) for f in files],
    )


def test_str_joins_args():
    assert str(_command()) == "protoc -I dir dir/a.proto"


def test_clean_removes_temp_file(tmp_path):
    temp = tmp_path / "fds"
    temp.write_bytes(b"x")
    command = _command()
    command.descriptor_set_temp_file_path = str(temp)
    command.clean()
    assert not temp.exists()
    command.clean()
    assert not temp.exists()


def test_plugin_failed():
    failure = parse_protoc_line(
        _command(), "--go_out: protoc-gen-go: Plugin failed with status code 1."
    )
    assert failure == Failure(message="protoc-gen-go failed with status code 1.")


def test_other_plugin_failure():
    failure = parse_protoc_line(_command(), "--foo_out: something broke")
    assert failure == Failure(message="protoc-gen-foo: something broke")


def test_positioned_line_uses_display_path():
    failure = parse_protoc_line(_command(), "a.proto:3:5: Expected \";\".")
    assert failure == Failure(
        filename="dir/a.proto", line=3, column=5, message='Expected ";".'
    )


@pytest.mark.parametrize("line", ["a.proto:x:5:msg", "a.proto:3:y:msg", "a.proto:3:5:"])
def test_bad_positioned_line_is_uninterpreted(line):
    assert parse_protoc_line(_command(), line) == Failure(message=line)


def test_unknown_line_is_uninterpreted():
    assert parse_protoc_line(_command(), "weird output") == Failure(message="weird output")


def test_unused_import_reported():
    line = "a.proto: warning: Import b.proto but not used."
    failure = parse_protoc_line(_command(), line)
    assert failure == Failure(filename="dir/a.proto", message='Import "b.proto" was not used.')


def test_unused_import_allowed():
    line = "a.proto: warning: Import b.proto but not used."
    assert parse_protoc_line(_command(allow_unused_imports=True), line) is None


def test_file_not_found():
    failure = parse_protoc_line(_command(), "b.proto: File not found.")
    assert failure == Failure(filename="", message='Import "b.proto" was not found.')


def test_import_not_found_is_ignored():
    line = 'a.proto: Import "b.proto" was not found or had errors.'
    assert parse_protoc_line(_command(), line) is None


def test_no_syntax_specified():
    line = (
        "[libprotobuf WARNING google/protobuf/compiler/parser.cc:546] "
        "No syntax specified for the proto file: a.proto. Please use it."
    )
    failure = parse_protoc_line(_command(), line)
    assert failure.filename == "dir/a.proto"
    assert failure.message.startswith("No syntax specified.")


def test_program_not_found():
    failure = parse_protoc_line(
        _command(), "protoc-gen-foo: program not found or is not executable"
    )
    assert failure == Failure(message="protoc-gen-foo not found or is not executable.")


def test_first_enum_value_zero():
    failure = parse_protoc_line(
        _command(), "a.proto: The first enum value must be zero in proto3."
    )
    assert failure == Failure(
        filename="dir/a.proto", message="The first enum value must be zero in proto3."
    )


def test_explicit_default_values():
    failure = parse_protoc_line(
        _command(), "a.proto: Explicit default values are not allowed in proto3."
    )
    assert failure == Failure(
        filename="dir/a.proto",
        message="Explicit default values are not allowed in proto3.",
    )


def test_parse_output_skips_blank_and_ignored_lines():
    output = (
        "\n  a.proto:1:2: first  \n\n"
        'a.proto: Import "b.proto" was not found or had errors.\n'
        "b.proto: File not found.\n"
    )
    failures = parse_protoc_output(_command(), output)
    assert failures == [
        Failure(filename="dir/a.proto", line=1, column=2, message="first"),
        Failure(message='Import "b.proto" was not found.'),
    ]


def test_parse_output_empty():
    assert parse_protoc_output(_command(), "   \n ") == []


def test_display_file_path_unique_match():
    files = [_file("x/a.proto"), _file("x/b.proto")]
    assert display_file_path(files, "a.proto") == "x/a.proto"


def test_display_file_path_errors():
    files = [_file("x/a.proto"), _file("y/a.proto")]
    with pytest.raises(ValueError):
        display_file_path(files, "a.proto")
    with pytest.raises(ValueError):
        display_file_path(files, "c.proto")


def test_best_file_path_falls_back_to_match():
    files = [_file("x/a.proto"), _file("y/a.proto")]
    assert best_file_path(files, "a.proto") == "a.proto"
    assert best_file_path(files, "c.proto") == "c.proto"
    assert best_file_path(files, "y/a.proto") == "y/a.proto"