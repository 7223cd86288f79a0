import pytest
from protean.exceptions import ValidationError
from storefront.order.order import validate_shipping_address


class TestShippingAddressValidation:
    def test_valid_address_is_cleaned(self, address):
        cleaned = validate_shipping_address({**address, "email": " Asha@Example.com ", "country": ""})
        assert cleaned["email"] == "asha@example.com"
        assert cleaned["country"] == "India"
        assert cleaned["address_line2"] is None

    def test_missing_fields_reported_together(self, address):
        incomplete = {**address, "city": "", "postal_code": "   "}
        incomplete.pop("full_name")

        with pytest.raises(ValidationError) as exc:
            validate_shipping_address(incomplete)

        assert set(exc.value.messages) == {"full_name", "city", "postal_code"}

    def test_invalid_email(self, address):
        with pytest.raises(ValidationError) as exc:
            validate_shipping_address({**address, "email": "not-an-email"})
        assert "email" in exc.value.messages

    def test_invalid_phone(self, address):
        with pytest.raises(ValidationError) as exc:
            validate_shipping_address({**address, "phone_number": "12ab"})
        assert "phone_number" in exc.value.messages

    def test_address_required(self):
        with pytest.raises(ValidationError):
            validate_shipping_address(None)
