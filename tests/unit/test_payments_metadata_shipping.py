import pytest

from shop_backend.payments.metadata import make_metadata, extract_owner_metadata
from shop_backend.payments.shipping import ship_to_text
from shop_backend.payments.errors import MissingOwnerMetadata


def test_make_metadata():
    assert make_metadata("session", "s-1", "usd") == {"ownerType": "session", "ownerId": "s-1", "currency": "usd"}

def test_extract_owner_metadata_roundtrip_fields():
    session = {"id": "cs_1", "metadata": {"ownerType": "user", "ownerId": "u1", "currency": "USD"}}
    assert extract_owner_metadata(session) == ("user", "u1", "usd")

def test_extract_owner_metadata_currency_fallbacks():
    session = {"id": "cs_1", "currency": "MXN", "metadata": {"ownerType": "user", "ownerId": "u1"}}
    assert extract_owner_metadata(session, default_currency="usd")[2] == "mxn"
    session = {"id": "cs_1", "metadata": {"ownerType": "user", "ownerId": "u1"}}
    assert extract_owner_metadata(session, default_currency="mxn")[2] == "mxn"

@pytest.mark.parametrize("metadata", [None, {}, {"ownerType": "user"}, {"ownerId": "u1"}, {"ownerType": "guest", "ownerId": "x"}])
def test_extract_owner_metadata_missing(metadata):
    with pytest.raises(MissingOwnerMetadata) as exc:
        extract_owner_metadata({"id": "cs_1", "metadata": metadata})
    assert exc.value.to_dict()["session_id"] == "cs_1"

def test_ship_to_text_full_address():
    shipping = {
        "name": "Ana López",
        "address": {
            "line1": "Av. Reforma 222",
            "line2": "Piso 3",
            "postal_code": "06600",
            "city": "CDMX",
            "state": "CDMX",
            "country": "MX",
        },
    }
    assert ship_to_text(shipping, None) == "Ana López, Av. Reforma 222 Piso 3, 06600 CDMX, CDMX MX"

def test_ship_to_text_falls_back_to_customer():
    customer = {"name": "Bob", "address": {"line1": "1 Main St", "city": "Austin", "country": "US"}}
    assert ship_to_text(None, customer) == "Bob, 1 Main St, Austin, US"

def test_ship_to_text_shipping_address_wins():
    shipping = {"address": {"city": "Monterrey", "country": "MX"}}
    customer = {"name": "Eva", "address": {"city": "Dallas", "country": "US"}}
    assert ship_to_text(shipping, customer) == "Eva, Monterrey, MX"

def test_ship_to_text_empty():
    assert ship_to_text(None, None) == ""
    assert ship_to_text({}, {"address": {}}) == ""
