# usageanalytics

A small client for emitting product usage events. Events are typed
dataclasses; the client turns them into capture, identify and group-identify
messages, batches them on a background thread and posts them as JSON to the
`/batch/` path of an analytics endpoint, retrying failed posts with
exponential backoff.

User identifiers never leave the process in clear text: fields tagged for
hashing are replaced with a SHA-256 digest of their JSON form (URL-safe
base64, no padding) behind a short prefix such as `usr_` or `rul_`.

The package has no dependencies beyond the standard library.

## Tracking events

```python
from usageanalytics.client import env, new
from usageanalytics.events import RequestCreated
from usageanalytics.identities import DeploymentInfo, UserInfo

with new(env()) as client:
    client.set_deployment_id("dep_101")

    client.track(RequestCreated(
        request_id="req_123",
        requested_by="usr_501",
        targets_count=4,
        access_groups_count=2,
        has_reason=True,
    ))

    client.track(UserInfo(id="usr_501", is_admin=False, group_count=5))

    client.track(DeploymentInfo(
        id="dep_101",
        version="v0.0.0",
        user_count=10,
        group_count=1,
        idp="cognito",
        stage="dev",
    ))
```

Leaving the `with` block (or calling `client.close()`) flushes every queued
message and waits for in-flight posts before returning. `track()` does not
raise for an event that cannot be hashed, marshalled or queued; it logs the
problem and calls `client.on_failure(event)` if that callback is set.

Ordinary events become a single `Capture` whose distinct ID is the hashed
user from `event.user_id()`. `UserInfo` becomes an `Identify` carrying a
`role` of `admin` or `end_user`, and `DeploymentInfo` becomes a
`GroupIdentify` of type `deployment`. Once a deployment ID is set, capture
and identify messages carry it as the `deployment` group.

`client.marshal_to_capture(event)` returns the `Capture` without sending it,
and raises `ValueError` if the user ID cannot be hashed.

## Configuration

`usageanalytics.client.Config` has three fields: `endpoint`, `enabled` and
`verbose`. Ready-made values are `DEFAULT`, `DEVELOPMENT` (verbose, using the
development endpoint) and `DISABLED`. `env()` builds one from the
environment:

| Variable                 | Effect                                                         |
|--------------------------|----------------------------------------------------------------|
| `CF_ANALYTICS_URL`       | Endpoint to post batches to; the built-in default if unset.    |
| `CF_ANALYTICS_DISABLED`  | `true` (any case) turns analytics off.                         |
| `CF_ANALYTICS_LOG_LEVEL` | Level of the `cf-analytics` logger; `debug` also sets verbose. |

Recognised log levels are `debug`, `info`, `warn`, `error`, `dpanic`,
`panic` and `fatal`; anything else leaves only critical messages.

`new(config)` returns a client that flushes every 50 milliseconds or every
three messages. A disabled configuration, or one the core rejects, yields a
client backed by `NoopClient`, which accepts and discards everything.

## Sharing a client

`set_context(client)` stores a client in a context variable and returns the
token that undoes it; `from_context()` returns the stored client, or a new
no-op client when none was stored.

## Event catalogue

| Type                          | Class             | Emitted when                     |
|-------------------------------|-------------------|----------------------------------|
| `cf:request.created`          | `RequestCreated`  | Access Request was created       |
| `cf:request.reviewed`         | `RequestReviewed` | Access Request was reviewed      |
| `cf:request.revoked`          | `RequestRevoked`  | Access Request was revoked       |
| `cf:rule.archived`            | `RuleArchived`    | Access Rule was archived         |
| `cf:rule.created`             | `RuleCreated`     | Access Rule was created          |
| `cf:rule.updated`             | `RuleUpdated`     | Access Rule was updated          |
| `cf:identify:user_info`       | `UserInfo`        | Access Request created/updated   |
| `cf:groupidentify:deployment` | `DeploymentInfo`  | Deployment updated               |

The first six live in `usageanalytics.events`, the last two in
`usageanalytics.identities`. Each class has `event_type` and `emitted_when`
attributes and a `fixture()` class method returning a populated sample. Every
class is recorded in `usageanalytics.event.ALL_EVENTS`, keyed by event type;
`register_event` adds further `Event` subclasses and works as a decorator.
`fixture_path(event_type)` in `usageanalytics.fixture_path` gives the
conventional location of an event's JSON fixture, for example
`fixtures/cf-request-created.json`.

## Defining events

An event is a dataclass subclassing `usageanalytics.event.Event`. Field
metadata drives encoding in `usageanalytics.encoding`:

- `"json"` names the property, with options after a comma: `"-"` skips the
  field and `omitempty` drops empty values.
- `"analytics"` gives a prefix under which the value is hashed.

`event_to_properties(event)` builds the properties, `hash_value(value,
prefix)` hashes one value (returning `None` for an empty string), and
`hash_values(obj)` returns a copy with tagged string fields hashed.

## Lower-level pieces

`usageanalytics.acore` holds the transport on its own:

- Message types `Capture`, `Identify`, `GroupIdentify` and `Alias`, whose
  `validate()` raises `FieldError` on a missing field.
- `BatchClient` (or `new_client(config)`), configured by
  `acore.config.Config`: endpoint, interval, batch size, verbosity, a
  `Callback` notified of delivered and dropped messages, a retry policy and a
  `transport(url, body, headers, timeout)` callable (urllib by default).
  It raises `ConfigError` for negative intervals or batch sizes and
  `ClientClosedError` when used after `close()`.
- `MessageQueue`, which cuts batches at the batch size or 500,000 bytes;
  single messages over 32,000 bytes are dropped with `MessageTooBigError`.
- `Executor`, bounding concurrent posts; `Backo` and its `Ticker` for
  retry delays; `StdLogger` for plain-text logs.

## What it does not do

The package is a library only: it installs no command-line tool, ships no
fixture files and does not generate documentation from the event catalogue.