import pytest

from exceptions import InvalidIdempotencyKey
from services.idempotency import IdempotencyKeyManager, generate, validate


def test_generated_keys_always_validate():
    keys = {generate() for _ in range(500)}
    assert len(keys) == 500
    assert all(validate(k) for k in keys)


@pytest.mark.parametrize("key", [
    "0f8fad5b-d9cb-469f-a165-70867728950e",
    "7C9E6679-7425-40DE-944B-E07FC1F90AE7",
    "00000000-0000-4000-8000-000000000000",
    "ffffffff-ffff-4fff-bfff-ffffffffffff",
])
def test_validate_accepts_uuid_v4(key):
    assert validate(key)


@pytest.mark.parametrize("key", [
    "0f8fad5b-d9cb-169f-a165-70867728950e",    # version 1
    "0f8fad5b-d9cb-569f-a165-70867728950e",    # version 5
    "0f8fad5b-d9cb-469f-c165-70867728950e",    # variant c
    "0f8fad5b-d9cb-469f-7165-70867728950e",    # variant 7
    "0f8fad5b-d9cb-469f-a165-70867728950",     # short
    "0f8fad5b-d9cb-469f-a165-70867728950e0",   # long
    "0f8fad5bd9cb469fa16570867728950e",        # no dashes
    "0f8fad5b-d9cb-469f-a165-70867728950g",    # non-hex
    " 0f8fad5b-d9cb-469f-a165-70867728950e",
    "",
    None,
    12345,
])
def test_validate_rejects_everything_else(key):
    assert not validate(key)


def test_manager_reuses_key_until_new_attempt():
    keys = IdempotencyKeyManager()
    first = keys.key_for_submit()
    assert keys.key_for_submit() == first
    assert keys.current == first

    second = keys.new_attempt()
    assert second != first
    assert keys.key_for_submit() == second


def test_manager_override_validates():
    keys = IdempotencyKeyManager()
    assert keys.override("0f8fad5b-d9cb-469f-a165-70867728950e") == "0f8fad5b-d9cb-469f-a165-70867728950e"
    assert keys.key_for_submit() == "0f8fad5b-d9cb-469f-a165-70867728950e"

    with pytest.raises(InvalidIdempotencyKey) as exc:
        keys.override("not-a-key")
    assert exc.value.details == {"idempotencyKey": "Idempotency key must be a UUID v4"}
    # failed override leaves the previous key in place
    assert keys.key_for_submit() == "0f8fad5b-d9cb-469f-a165-70867728950e"


def test_manager_rejects_invalid_initial_key():
    with pytest.raises(InvalidIdempotencyKey):
        IdempotencyKeyManager("0f8fad5b-d9cb-169f-a165-70867728950e")


def test_attach_keeps_caller_key(create_request):
    keys = IdempotencyKeyManager()
    req = create_request()
    attached = keys.attach(req)
    assert attached.idempotency_key == keys.current
    assert req.idempotency_key is None

    own = create_request(idempotency_key="7c9e6679-7425-40de-944b-e07fc1f90ae7")
    assert keys.attach(own) is own
