# littlevec

littlevec is a small vector database. You create named databases of
fixed-dimension vectors, store vectors with an optional JSON payload, and run
nearest-neighbour searches against them, either over a plain JSON-over-HTTP
interface or directly from Python.

## Installation

```
pip install littlevec
```

## Running the server

```
littlevec
```

This starts an HTTP server on `127.0.0.1:5577`. The options are:

- `--host HOST` – address to listen on (default `127.0.0.1`)
- `--port PORT` – port to listen on (default `5577`)
- `--config FILE` – a file of `key = value` settings (see *Configuration*)

Run `littlevec --help` to see them listed.

Every endpoint takes a `POST` request whose body is a JSON object. Write
operations answer `{"success": true}` with status 200. On failure the server
answers with status 422 and a body of the form `{"error": "<message>"}`. A
request to a known path that is not a `POST`, or a `POST` with an empty body,
gets status 422 with an empty body. An unknown path gets status 404.

## Endpoints

| Path                    | Purpose                                     |
|-------------------------|---------------------------------------------|
| `/vecdb/create`         | create a database                           |
| `/vecdb/update`         | change a database's distance function       |
| `/vecdb/delete`         | delete a database and all its vectors       |
| `/vectors/set`          | insert or overwrite vectors                 |
| `/vectors/delete`       | delete vectors by id                        |
| `/vectors/search`       | find the nearest vectors to one vector      |
| `/vectors/batch_search` | find the nearest vectors to several vectors |

Every request needs a non-empty string `db_name`. All endpoints except
`/vecdb/create` answer `"Data base doesn't exist."` for an unknown name.

### Distance functions

`dist` may be one of `qcos` (cosine distance using a fast approximate inverse
square root; the default), `cos`, `dot_prod` (negated dot product), `l1` or
`l2`. Smaller values are nearer. Any other string is rejected, as is a `dist`
that is not a string.

### Creating a database

```json
{"db_name": "films", "dim": 3, "dist": "l2"}
```

`dim` is a positive integer no larger than the configured maximum (10000 by
default). Creating a database that already exists is an error.

### Updating a database

```json
{"db_name": "films", "dist": "cos"}
```

Choosing the distance function the database already uses, or leaving `dist`
out, is reported as `"Nothing changed."`.

### Storing vectors

```json
{
  "db_name": "films",
  "data": [
    {"id": "a", "vector": [0.1, 0.2, 0.3], "payload": {"title": "First"}},
    {"id": "b", "vector": [0.3, 0.2, 0.1]}
  ]
}
```

`data` must be a non-empty array of objects. Each `id` must be a non-empty
string; each vector must have exactly the database's dimension and contain
only numbers, which are stored as 32-bit floats. `payload` is optional and can
be any JSON value. Storing a vector under an existing id replaces it.

Items are stored one at a time, in order: if an item is invalid the request
fails, but items before it have already been stored.

### Deleting vectors

```json
{"db_name": "films", "data": [{"id": "a"}, {"id": "b"}]}
```

Ids that are not stored are ignored.

### Searching

```json
{"db_name": "films", "vector": [0.1, 0.2, 0.3], "top_k": 2}
```

The answer lists up to `top_k` nearest vectors, closest first. Each hit has
its `id`, its `distance` and, when one was stored, its `payload`. For the
`l2` database above, the first hit is:

```json
{
  "nearest": [
    {
      "distance": 0.0,
      "id": "a",
      "payload": {
        "title": "First"
      }
    },
    ...
  ]
}
```

Keys in answers are sorted and indented by the configured `json_indent`.
`top_k` defaults to 5 and must be a positive integer. `dist` may be given to
use a different distance function for this search only.

### Batch searching

```json
{
  "db_name": "films",
  "top_k": 1,
  "data": [
    {"vector": [0.1, 0.2, 0.3], "extra": "first query"},
    {"vector": [0.3, 0.2, 0.1]}
  ]
}
```

All queries are answered in a single pass over the database. The answer holds
one entry per query, in order, each with its `nearest` list; any `extra` value
is echoed back unchanged:

```json
{
  "results": [
    {"extra": "first query", "nearest": [{"distance": 0.0, "id": "a", "payload": {"title": "First"}}]},
    {"nearest": [{"distance": 0.0, "id": "b"}]}
  ]
}
```

## Using it from Python

The same operations are available without a network server:

```python
from littlevec.options import VecDbOpts
from littlevec.vecdb import MemoryStore, VecDb
from littlevec.server import VecDbApp

db = VecDb(VecDbOpts(), MemoryStore())
app = VecDbApp(db)

app.handle("POST", "/vecdb/create", '{"db_name": "films", "dim": 3}')
app.handle("POST", "/vectors/set",
           '{"db_name": "films", "data": [{"id": "a", "vector": [1, 0, 0]}]}')
response = app.handle("POST", "/vectors/search",
                      '{"db_name": "films", "vector": [1, 0, 0]}')
print(response.status, response.body)
```

`handle` returns a `Response` holding `status` and the JSON `body`.
`make_server(app, host, port)` wraps an app in a threading HTTP server of your
own.

Lower down:

- `littlevec.handlers` has one function per endpoint (`create_db`,
  `update_db`, `delete_db`, `set_vectors`, `delete_vectors`, `search_vector`,
  `search_vectors`). Each takes a `VecDb` and a request body and returns the
  reply body, raising `littlevec.validator.RequestError` on a bad request.
- `littlevec.vecdb.VecDb` works on Python values: `create_db`, `update_db`,
  `delete_db`, `get_meta`, `set_vec`, `del_vec`, `search_vec` and
  `search_batch_vec`. Failures raise `VecDbError`. Search results are
  `littlevec.units.SearchResult` objects.
- `littlevec.distance` exposes the distance functions and `get_index`,
  `get_name` and `get_func` to look them up.

## Configuration

`VecDbOpts.from_config` reads these settings from a mapping, each optional.
The `--config` file gives them as `key = value` lines; blank lines and lines
starting with `#`, `;` or `[` are skipped, and surrounding quotes are removed
from values.

| Key              | Default      | Meaning                               |
|------------------|--------------|---------------------------------------|
| `db_counter_key` | `db_counter` | key of the database counter           |
| `db_key`         | `db`         | key prefix for database metadata      |
| `vec_key`        | `vec`        | key prefix for stored vectors         |
| `payload_key`    | `pld`        | key prefix for stored payloads        |
| `max_dim`        | `10000`      | largest dimension a database may have |
| `top_k`          | `5`          | default number of search results      |
| `json_indent`    | `2`          | indentation of search answers; a negative value gives compact output |

## What it does not do

Data is held only in memory, in `MemoryStore`: nothing is written to disk, and
every database is lost when the server stops. Searches are exact, scanning
every stored vector of the database; there is no index.