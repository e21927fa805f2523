import pytest

from oidc_exchange.errors import MalformedIdentifierError, MissingFieldError, ValidationError
from oidc_exchange.models import ExchangeRequest
from oidc_exchange.validation import is_guid_shape, validate_request

from conftest import CLIENT_ID, TENANT_ID


def _request(**overrides):
    values = {"oidc_token": "oidc-token", "tenant_id": TENANT_ID, "client_id": CLIENT_ID}
    values.update(overrides)
    return ExchangeRequest(**values)


def test_valid_request_passes():
    validate_request(_request())


@pytest.mark.parametrize(
    "field",
    ["oidc_token", "tenant_id", "client_id"],
)
def test_missing_field(field):
    with pytest.raises(MissingFieldError) as excinfo:
        validate_request(_request(**{field: ""}))
    assert excinfo.value.field == field
    assert str(excinfo.value) == f"{field} is not provided"


def test_whitespace_only_is_missing():
    with pytest.raises(MissingFieldError):
        validate_request(_request(oidc_token="   "))


def test_missing_token_reported_before_identifiers():
    with pytest.raises(MissingFieldError) as excinfo:
        validate_request(_request(oidc_token="", tenant_id="", client_id=""))
    assert excinfo.value.field == "oidc_token"


@pytest.mark.parametrize(
    "value",
    [
        "tenant-id",
        "72f988bf86f141af91ab2d7cd011db47",
        "72f988bf-86f1-41af-91ab-2d7cd011db4",
        "72f988bf-86f1-41af-91ab-2d7cd011db477",
        "72f988bf_86f1-41af-91ab-2d7cd011db47",
        "{72f988bf-86f1-41af-91ab-2d7cd011db4}",
    ],
)
def test_malformed_tenant(value):
    with pytest.raises(MalformedIdentifierError) as excinfo:
        validate_request(_request(tenant_id=value))
    assert excinfo.value.field == "tenant_id"
    assert "GUID" in str(excinfo.value)


def test_malformed_client():
    with pytest.raises(MalformedIdentifierError) as excinfo:
        validate_request(_request(client_id="client-id"))
    assert excinfo.value.field == "client_id"


def test_shape_check_ignores_non_hex_characters():
    assert is_guid_shape("zzzzzzzz-zzzz-zzzz-zzzz-zzzzzzzzzzzz")


def test_tenant_alias_rejected_by_default():
    with pytest.raises(MalformedIdentifierError):
        validate_request(_request(tenant_id="common"))


@pytest.mark.parametrize("alias", ["common", "organizations", "consumers", "Common"])
def test_tenant_alias_allowed_when_enabled(alias):
    validate_request(_request(tenant_id=alias), allow_tenant_aliases=True)


def test_client_alias_never_allowed():
    with pytest.raises(MalformedIdentifierError) as excinfo:
        validate_request(_request(client_id="common"), allow_tenant_aliases=True)
    assert excinfo.value.field == "client_id"


def test_validation_errors_share_base_class():
    assert issubclass(MissingFieldError, ValidationError)
    assert issubclass(MalformedIdentifierError, ValidationError)
