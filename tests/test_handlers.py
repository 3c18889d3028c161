import json

import pytest

from littlevec import handlers
from littlevec.options import VecDbOpts
from littlevec.validator import RequestError
from littlevec.vecdb import VecDb


def body(**fields):
    return json.dumps(fields)


@pytest.fixture
def db():
    database = VecDb()
    handlers.create_db(database, body(db_name="d", dim=2, dist="l2"))
    handlers.set_vectors(
        database,
        body(
            db_name="d",
            data=[
                {"id": "a", "vector": [0, 0], "payload": {"k": 1}},
                {"id": "b", "vector": [3, 4]},
                {"id": "c", "vector": [1, 0], "payload": "text"},
            ],
        ),
    )
    return database


def test_create_returns_success_and_stores_meta():
    database = VecDb()
    assert handlers.create_db(database, body(db_name="x", dim=3)) == '{"success": true}'
    meta = database.get_meta("x")
    assert (meta.dim, meta.dist) == (3, 1)


def test_create_twice_is_rejected():
    database = VecDb()
    handlers.create_db(database, body(db_name="x", dim=3))
    with pytest.raises(RequestError) as err:
        handlers.create_db(database, body(db_name="x", dim=3))
    assert err.value.message == "Data Base already exists."
    assert err.value.code == 422


def test_create_missing_dim():
    with pytest.raises(RequestError) as err:
        handlers.create_db(VecDb(), body(db_name="x"))
    assert err.value.message == "Missing or invalid 'dim' key."


def test_create_over_max_dim():
    database = VecDb(VecDbOpts(max_dim=4))
    with pytest.raises(RequestError) as err:
        handlers.create_db(database, body(db_name="x", dim=5))
    assert err.value.message == "The maximum dimension size has been exceeded."


def test_empty_body_has_no_message():
    with pytest.raises(RequestError) as err:
        handlers.create_db(VecDb(), b"")
    assert err.value.message is None


def test_update_changes_distance(db):
    assert handlers.update_db(db, body(db_name="d", dist="cos")) == handlers.SUCCESS
    assert db.get_meta("d").dist == 2


def test_update_same_distance_rejected(db):
    with pytest.raises(RequestError) as err:
        handlers.update_db(db, body(db_name="d", dist="l2"))
    assert err.value.message == "Nothing changed."


def test_update_unknown_db():
    with pytest.raises(RequestError) as err:
        handlers.update_db(VecDb(), body(db_name="nope", dist="l2"))
    assert err.value.message == "Data base doesn't exist."


def test_delete_db_removes_everything(db):
    handlers.delete_db(db, body(db_name="d"))
    assert db.get_meta("d") is None
    assert list(db.store.iter_prefix("vec:")) == []
    assert list(db.store.iter_prefix("pld:")) == []


def test_search_orders_by_distance(db):
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[0, 0], top_k=2)))
    nearest = reply["nearest"]
    assert [hit["id"] for hit in nearest] == ["a", "c"]
    assert nearest[0]["payload"] == {"k": 1}
    assert nearest[0]["distance"] <= nearest[1]["distance"]


def test_search_string_payload_round_trip(db):
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[1, 0], top_k=1)))
    assert reply["nearest"][0]["id"] == "c"
    assert reply["nearest"][0]["payload"] == "text"


def test_search_without_payload_omits_key(db):
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[3, 4], top_k=1)))
    assert reply["nearest"][0]["id"] == "b"
    assert "payload" not in reply["nearest"][0]


def test_search_default_top_k_returns_all_when_fewer(db):
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[0, 0])))
    assert sorted(hit["id"] for hit in reply["nearest"]) == ["a", "b", "c"]


def test_search_wrong_dimension(db):
    with pytest.raises(RequestError) as err:
        handlers.search_vector(db, body(db_name="d", vector=[1, 2, 3]))
    assert err.value.message == "Vector must be a numeric array with correct dimension."


def test_search_bad_top_k(db):
    with pytest.raises(RequestError) as err:
        handlers.search_vector(db, body(db_name="d", vector=[0, 0], top_k=0))
    assert err.value.message == "Invalid 'top_k' value. Must be more than 0."


def test_search_dist_override_is_not_persisted(db):
    handlers.search_vector(db, body(db_name="d", vector=[1, 1], dist="dot_prod"))
    assert db.get_meta("d").dist == 4 + 1


def test_batch_search_keeps_extra(db):
    reply = json.loads(
        handlers.search_vectors(
            db,
            body(
                db_name="d",
                top_k=1,
                data=[{"vector": [0, 0], "extra": {"q": 7}}, {"vector": [3, 4]}],
            ),
        )
    )
    results = reply["results"]
    assert [r["nearest"][0]["id"] for r in results] == ["a", "b"]
    assert results[0]["extra"] == {"q": 7}
    assert "extra" not in results[1]


def test_batch_search_item_must_be_object(db):
    with pytest.raises(RequestError) as err:
        handlers.search_vectors(db, body(db_name="d", data=[[0, 0]]))
    assert err.value.message == "Each item in 'data' must be an object."


def test_delete_vectors(db):
    handlers.delete_vectors(db, body(db_name="d", data=[{"id": "a"}, {"id": "c"}]))
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[0, 0])))
    assert [hit["id"] for hit in reply["nearest"]] == ["b"]


def test_delete_vectors_empty_id(db):
    with pytest.raises(RequestError) as err:
        handlers.delete_vectors(db, body(db_name="d", data=[{"id": ""}]))
    assert err.value.message == "'id' in 'data' item must not be empty."


@pytest.mark.parametrize(
    "item, message",
    [
        ("x", "Each item in 'data' array must be an object."),
        ({"vector": [1, 2]}, "Missing or invalid 'id' key in 'data' item."),
        ({"id": "", "vector": [1, 2]}, "'id' must not be empty."),
        ({"id": "z"}, "Missing or invalid 'vector' key in 'data' item."),
        ({"id": "z", "vector": []}, "Value of 'vector' must not be empty."),
        ({"id": "z", "vector": [1]}, "Dimension of 'vector' must match db dimension."),
        ({"id": "z", "vector": [1, "2"]}, "All elements of 'vector' must be numeric."),
    ],
)
def test_set_vectors_errors(db, item, message):
    with pytest.raises(RequestError) as err:
        handlers.set_vectors(db, body(db_name="d", data=[item]))
    assert err.value.message == message


def test_set_vectors_stores_items_before_error(db):
    with pytest.raises(RequestError):
        handlers.set_vectors(
            db, body(db_name="d", data=[{"id": "e", "vector": [9, 9]}, {"id": "f"}])
        )
    reply = json.loads(handlers.search_vector(db, body(db_name="d", vector=[9, 9], top_k=1)))
    assert reply["nearest"][0]["id"] == "e"


def test_set_vectors_requires_data(db):
    with pytest.raises(RequestError) as err:
        handlers.set_vectors(db, body(db_name="d", data=[]))
    assert err.value.message == "Missing or invalid 'data' key. Must be a non-empty array."


def test_negative_indent_gives_compact_output():
    database = VecDb(VecDbOpts(json_indent=-1))
    handlers.create_db(database, body(db_name="d", dim=1))
    handlers.set_vectors(database, body(db_name="d", data=[{"id": "a", "vector": [1]}]))
    reply = handlers.search_vector(database, body(db_name="d", vector=[1]))
    assert "\n" not in reply and " " not in reply
    assert json.loads(reply)["nearest"][0]["id"] == "a"