# onec_mcp

Building blocks for exposing a 1C:Enterprise infobase to MCP-aware tools:

- `onec_mcp.client` — a small JSON-over-HTTP client for the infobase's HTTP
  service (`Client` with `get()` and `post()`, raising `OneCError` on
  failures).
- `onec_mcp.models` — dataclasses for the service's request and response
  bodies (`ObjectStructure`, `QueryRequest`, `QueryResult`, `FormStructure`,
  `EventLogEntry`, `ConfigurationInfo`, `Counterparty` and others), each with
  `to_dict()` and `from_dict()`.
- `onec_mcp.config` — settings read from the environment (`load()`,
  returning a `Config`).
- `onec_mcp.profiles` — choose the tool profile, either given explicitly or
  detected from the configuration name and version (`normalize`, `resolve`,
  `detect`).
- `onec_mcp.prompts` — ready-made prompts for common 1C development tasks
  (`list_prompts`, `get_prompt`, `required_arg`).
- `onec_mcp.xmlpatch` and `onec_mcp.installer` — prepare the HTTP service
  extension for the target platform version and load it into an infobase
  through the DESIGNER command line (`install`, `find_platform`,
  `run_designer`).
- `onec_mcp.shard` — deterministic distribution of module names across index
  shards (`shard_count`, `shard_for_id`, `split_by_hash`).

The package has no runtime dependencies beyond the standard library.

## Configuration

`load()` starts from the base URL `http://localhost:8080/hs/mcp-1c` and
overrides it, and the credentials, from these variables when they are set
and not empty:

| Variable           | Meaning                           |
|--------------------|-----------------------------------|
| `MCP_1C_BASE_URL`  | Base URL of the 1C HTTP service   |
| `MCP_1C_USER`      | User for basic authentication     |
| `MCP_1C_PASSWORD`  | Password for basic authentication |

## Talking to the infobase

```python
from onec_mcp.config import load
from onec_mcp.client import Client, OneCError
from onec_mcp.models import ConfigurationInfo
from onec_mcp.profiles import ProfileResolutionError, resolve

cfg = load()
client = Client(cfg.base_url, cfg.user, cfg.password)

try:
    info = ConfigurationInfo.from_dict(client.get("/configuration"))
    print(info.name, info.version)
except OneCError as exc:
    print("1C is not reachable:", exc)

try:
    profile = resolve(client, "auto")   # "buh_3_0" for БухгалтерияПредприятия 3.0.x, else "generic"
except ProfileResolutionError as exc:
    profile = exc.fallback              # "generic"
```

`get()` and `post()` return the decoded JSON body; `post()` accepts a plain
value or any model from `onec_mcp.models`. Basic authentication is sent only
when a user is set, each request closes its connection, and the default
timeout is 30 seconds. A non-200 status raises `OneCError` with the status in
its `status` attribute.

Accepted profile values are `auto`, `generic`, `buh_3_0` and `unknown`
(case and surrounding spaces are ignored); an empty value means `auto`.
Anything else makes `normalize()` and `resolve()` raise `ValueError`.

## Prompts

```python
from onec_mcp.prompts import get_prompt, list_prompts

for prompt in list_prompts():
    print(prompt.name, "-", prompt.description)

result = get_prompt("write_posting", {"document_name": "РеализацияТоваровУслуг"})
print(result.description)
print(result.messages[0].text)
```

An unknown prompt name, or a missing or empty required argument, raises
`PromptError`; the message names the prompt or argument.

## Installing the extension

`install()` copies the extension sources to a temporary directory, rewrites
the XML dump format version to one the platform accepts, adjusts or strips
elements that older platforms (8.3.10 – 8.3.13) reject, and runs DESIGNER to
load the extension and update the database, retrying with patched sources
when DESIGNER reports known incompatibilities. Platforms older than 8.3.10
are refused. When no executable is given, the standard installation folders
of the current OS are searched. Failures raise `InstallError`.

```python
from onec_mcp.installer import InstallError, install

try:
    install(
        "extension/src",        # directory holding Configuration.xml and the rest
        "/home/me/InfoBase",    # file infobase path, or "server\\base" with server_mode=True
        False,                  # server_mode
        "",                     # platform executable, empty to search for it
        "",                     # infobase user
        "",                     # infobase password
        "",                     # platform version override such as "8.3.13"
    )
except InstallError as exc:
    print(exc)
```

## What the package does not do

- It does not run an MCP server and has no command-line entry point; it
  provides the client, models, prompts and installer a server would use.
- It does not ship the extension's XML sources: `install()` needs a directory
  that holds them.
- It does not build or search a full-text index of module code;
  `onec_mcp.shard` only decides which shard a module name belongs to.

## Running the tests

Install the `test` extra and run `pytest` from the project root.