# xraycore

Small, dependency-free building blocks for tracing instrumentation.

## What is inside

- `xraycore.header`: parse and render trace header values
  (`Root=...;Parent=...;Sampled=1`) with `Header.from_string` and `str(header)`.
  A `Header` has `trace_id`, `parent_id`, `sampling_decision` and
  `additional_data`; `Self=` entries are dropped when parsing.
  `SamplingDecision` holds the states `SAMPLED`, `NOT_SAMPLED`, `REQUESTED` and
  `UNKNOWN`.
- `xraycore.pattern`: glob-style matching where `*` matches any run of
  characters and `?` matches exactly one. Use
  `wildcard_match(pattern, text, case_insensitive)` or
  `wildcard_match_case_insensitive(pattern, text)`.
- `xraycore.daemon_config`: resolve the UDP and TCP endpoints of the trace
  daemon, either from the `AWS_XRAY_DAEMON_ADDRESS` environment variable (which
  takes precedence) or from a string such as `127.0.0.1:2000` or
  `tcp:127.0.0.1:2000 udp:127.0.0.2:2001`. The result is a `DaemonEndpoints`
  with `udp_addr` and `tcp_addr`, each an `Address(ip, port)`. An invalid or
  unresolvable address raises `DaemonAddressError`.
  `get_default_daemon_endpoints()` returns `127.0.0.1:2000` for both protocols,
  and `get_daemon_endpoints()` falls back to it when the environment variable
  is not set.
- `xraycore.logger`: the package's log functions (`debug`, `info`, `warning`,
  `error`, and `debug_deferred`, which calls its function only when debug
  output is enabled). They write to the standard `logging` logger named
  `xraycore` (`xraycore.logger.LOGGER`), so configure output through `logging`.
- `xraycore.plugins`: gather metadata about the hosting environment into a
  `PluginMetadata` record. `add_ec2_metadata` reads the instance identity
  document from the instance metadata service (trying an IMDSv2 token first,
  `get_token` and `get_metadata`), `add_ecs_metadata` records the host name as
  the container name, and `add_beanstalk_metadata` reads the Elastic Beanstalk
  configuration file. Failures are logged and leave the record unchanged.
  `init_ec2`, `init_ecs` and `init_beanstalk` fill the shared
  `INSTANCE_PLUGIN_METADATA` record when that part is still missing.
- `xraycore.ctxmissing`: strategies for what happens when no trace context is
  present: `RuntimeErrorStrategy` raises `ContextMissingError`,
  `LogErrorStrategy` logs an error, `IgnoreErrorStrategy` does nothing.
- `xraycore.exception`: `DefaultFormattingStrategy` (with a `frame_count` from
  0 to 32, default 32; anything else raises `ValueError`) builds `XRayError`
  values with `error`, `errorf`, `panic` and `panicf`, and turns any exception
  into an `ExceptionRecord` with `exception_from_error`. `MultiError` reports
  several errors together; `convert_stack` and `new_exception_id` are the
  helpers the records are built with.

## What it does not do

There is no recorder, no segment or subsegment model, no sampling rules engine
and no emitter: nothing here sends data to the daemon. The package supplies the
pieces such a tracer is built from (header handling, endpoint resolution,
pattern matching, host metadata and error records).

## Installing

```
pip install .
```

## Examples

```python
from xraycore.header import Header, SamplingDecision

h = Header.from_string("Root=1-5759e988-bd862e3fe1be46a994272793;Parent=53995c3f42cd8ad8;Sampled=1")
assert h.sampling_decision is SamplingDecision.SAMPLED
print(str(h))
```

```python
from xraycore.pattern import wildcard_match_case_insensitive

wildcard_match_case_insensitive("*/users/?", "/api/users/7")  # True
```

```python
from xraycore.daemon_config import get_daemon_endpoints_from_string

endpoints = get_daemon_endpoints_from_string("tcp:127.0.0.1:2000 udp:127.0.0.1:2001")
print(endpoints.udp_addr, endpoints.tcp_addr)  # 127.0.0.1:2001 127.0.0.1:2000
```

```python
from xraycore.exception import DefaultFormattingStrategy

strategy = DefaultFormattingStrategy()
try:
    1 / 0
except ZeroDivisionError as exc:
    record = strategy.exception_from_error(exc)
print(record.type, record.message, record.to_dict()["stack"][0])
```

## Running the tests

```
pip install ".[test]"
pytest
```