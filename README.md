# fnkit

A library of building blocks for services that run user functions: archive
extraction, runner metadata, a local file cache with timed removal, and a small
toolkit for chat-completion APIs with a DeepSeek client.

## Installation

```
pip install fnkit
pip install "fnkit[test]"   # with test dependencies
```

## Modules

- `fnkit.compress` — `decompress(archive_path, dest)` extracts a `.zip`,
  `.tar`, `.tar.gz`/`.tgz`, `.tar.bz2`/`.tbz2` or `.tar.xz`/`.txz` archive into
  `dest`, creating the directory if needed. The format is chosen from the file
  name. Entries that would land outside `dest`, or on a file that already
  exists, are refused. Every failure raises `DecompressError`.
- `fnkit.runnerproject` — the `Runner` dataclass (user, name, version, kind,
  language) with `request_subject()`, `bin_path()`, `request_path()`,
  `build_name()`, `version_num()`, `next_version()` and `current_version()`,
  which reads `<root>/<user>/<name>/workplace/metadata/version.txt` and falls
  back to `v0`. `new_runner(user, name, root, version=None)` validates its
  arguments and raises `ValueError` on an empty user or name or a version not of
  the form `v<n>`. `RunFunctionRequest` describes a call into a runner, and both
  classes have `to_dict()`.
- `fnkit.filecache` — `LocalFileCache` maps storage paths to local files with an
  expiry time (`-1` never expires). `sweep()` removes expired entries and files
  scheduled with `delete_task()` from disk. A background thread runs it every
  `check_interval` seconds unless `start=False`. `close()` stops the thread, and
  the cache works as a context manager.
- `fnkit.constants` — `TRACE_ID`, `HTTP_TRACE_ID` and the `SysCallType`,
  `UserCallType` and `RenderType` enums.
- `fnkit.llm.types` — dataclasses for requests, responses, messages, tools,
  retrieval context and client info, with `LLMError` and `APIError`.
- `fnkit.llm.config` — `ProviderType`, `Config` (with `validate()`, `clone()`
  and `with_*` setters), provider-specific subclasses, and `get_default_config()`
  and `get_json_config()`.
- `fnkit.llm.requests` — builders for messages and for plain, JSON,
  code-generation and structured requests.
- `fnkit.llm.manager` — the `LLMClient` and `LLMClientFactory` interfaces and a
  `Manager` registry, with a process-wide instance from `default_manager()`.
  Module-level helpers such as `quick_chat()` use that instance.
- `fnkit.llm.chat` — `chat_with_result`, `chat_with_json_result`,
  `chat_with_string_result` and `chat_with_custom_prompt`. They return text or
  decoded JSON.
- `fnkit.llm.deepseek` — `DeepSeekClient` fills in defaults from its config. It
  inserts retrieved documents as a system message, substitutes `{{name}}`
  template variables, and retries on connection errors, 5xx and 429 responses.
  Importing the module registers `DeepSeekFactory` with the default manager.

## Quick start

```python
from fnkit.llm.config import ProviderType, get_default_config
from fnkit.llm.manager import default_manager
import fnkit.llm.deepseek  # registers the DeepSeek factory

config = get_default_config(ProviderType.DEEPSEEK).with_api_key("placeholder")
default_manager().create_client(config)

answer = default_manager().quick_chat(ProviderType.DEEPSEEK, "Hello")
print(answer)
```

### JSON replies

```python
from fnkit.llm.chat import chat_with_json_result
from fnkit.llm.config import ProviderType

data = chat_with_json_result(ProviderType.DEEPSEEK, "List three colours as {\"colours\": [...]}")
print(data["colours"])
```

### Local file cache

```python
from fnkit.filecache import LocalFileCache

with LocalFileCache() as cache:
    cache.set("bucket/report.pdf", "/tmp/report.pdf", 60)
    entry = cache.get("bucket/report.pdf")
    print(entry.file_path if entry else "missing")
```

### Archives and runners

```python
from fnkit.compress import decompress
from fnkit.runnerproject import new_runner

decompress("dist.zip", "out/dist")
runner = new_runner("alice", "demo", "/srv/runners", "v3")
print(runner.request_subject())   # runner.alice.demo.v3.run
print(runner.next_version())      # v4
```

## What the package does not do

The package has no command-line tool or server. It does not generate JSON
Schemas from dataclasses. It has no client for a knowledge-base service, so
retrieval documents must be supplied by the caller, for example as
`RetrievedDocument` objects passed to `quick_chat_with_rag`. DeepSeek is the
only provider with a client. Other providers need an `LLMClientFactory`
registered with the `Manager`.

## Running the tests

```
pytest
```