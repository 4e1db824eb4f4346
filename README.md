# prototool

A library for working with Protocol Buffers projects. It finds and reads
`prototool.yaml` configuration files, downloads and caches a matching `protoc`
release, and turns the error output of `protoc` into uniform
`filename:line:column:message` failures.

## Configuration

A `prototool.yaml` file applies to its directory and everything below it:

```yaml
excludes:
  - vendor
protoc:
  version: 3.6.1
  includes:
    - third_party
  allow_unused_imports: false
lint:
  rules:
    add: []
    remove: []
generate:
  go_options:
    import_path: example.com/project/idl
  plugins:
    - name: go
      type: go
      flags: plugins=grpc
      output: ../gen/go
```

Load it through `prototool.config_provider.ConfigProvider`:

```python
from prototool.config_provider import ConfigProvider

provider = ConfigProvider()
config = provider.get_for_dir("/abs/path/to/project/idl")
print(config.compile.include_paths)
print([plugin.name for plugin in config.gen.plugins])
```

- `get_for_dir(dir_path)` searches from `dir_path` up to the root for
  `prototool.yaml` and returns an empty `Config` if there is none.
- `get_file_path_for_dir(dir_path)` returns the file found by that search, or `""`.
- `get(file_path)` reads one given file.
- `get_exclude_prefixes_for_dir(dir_path)` reads only the file in `dir_path`
  itself and returns its resolved `excludes`.

Paths passed to the provider must be absolute. Unknown keys, wrong value types
and invalid settings raise `prototool.settings.ConfigError`. The result is a
`prototool.settings.Config` dataclass whose paths are all absolute, with
plugins sorted by name and lint rule IDs upper-cased, deduplicated and sorted.
`external_config_to_config` and `get_exclude_prefixes` do the same conversion
for data that did not come from a file.

## Downloading protoc

```python
from prototool.downloader import Downloader

downloader = Downloader(config)
print(downloader.protoc_path())
print(downloader.well_known_types_include_path())
```

The version comes from `protoc.version` in the config, defaulting to
`prototool.vars.DEFAULT_PROTOC_VERSION`. Releases are cached under
`$XDG_CACHE_HOME/prototool/<uname -s>/<uname -m>/protobuf/<version>`; if that
variable is not set, `~/Library/Caches` is used on macOS and `~/.cache` on
Linux. Pass `cache_path` to choose another directory, or `protoc_url` to use a
specific zip file given as an `http://`, `https://` or `file://` URL.
`delete()` removes everything cached. Only Linux and macOS on x86-64 are
supported; anything else raises `DownloadError`.

## Reading protoc output

`prototool.protoc_output` describes one `protoc` run as a `ProtocCommand` and
interprets what it wrote to stderr:

```python
from prototool.protoc_output import ProtocCommand, parse_protoc_output

command = ProtocCommand(
    args=["protoc", "-I", "idl", "idl/foo/foo.proto"],
    proto_set=proto_set,
    proto_files=proto_files,
)
for failure in parse_protoc_output(command, stderr_text):
    print(failure)
```

`proto_set` must have `config.compile.allow_unused_imports`; each entry of
`proto_files` must have a `display_path`, which is used to report file names
consistently. Known protoc and plugin messages are rewritten into short
failures; lines that cannot be interpreted become a failure holding the whole
line. `ProtocCommand.clean()` removes the temporary descriptor set file, if
one was set.

## Failures

`prototool.text.Failure` holds `filename`, `line`, `column`, `id` and
`message`. `str(failure)` gives `filename:line:column:message` (with `<input>`
for an empty filename and `1` for a zero position). `failure.write(stream,
*fields)` writes a line with the chosen `FailureField`s, which
`parse_colon_separated_failure_fields("filename:line")` reads from a string.
`sort_failures` sorts a list in place by filename, line, column, id and message.

## Helpers

- `prototool.strs`: case checks and conversions (`to_upper_camel_case`,
  `to_upper_snake_case`, `is_lower_snake_case`, `dedupe_sort`, `intersection`).
- `prototool.protostrs`: default values for `go_package`, `java_package` and
  `java_outer_classname`.

## What this package does not do

It does not run `protoc` over a project: there is no compile or generate step
that builds command lines from a config, starts `protoc` and its plugins, and
collects the results. It has no table of the Google well-known types or their
Go package mappings, and no command-line program.