"""Tests for validated session storage of checkout step state."""

import json

from checkout.session.schemas import CarrierSelectionInput, OrderConfirmationInput, ShippingAddressInput
from checkout.steps.sequencer import (
    CheckoutContext,
    CheckoutStep,
    choose_relay_point,
    guard,
    select_carrier,
    sign_in,
    submit_shipping_address,
)
from checkout.steps.storage import (
    ORDER_CONFIRMATION,
    SELECTED_CARRIER,
    SHIPPING_ADDRESS,
    SessionStore,
    load_context,
    save_context,
)

ADDRESS = {
    "firstName": "Jean",
    "lastName": "Dupont",
    "street": "12 rue de la Paix",
    "city": "Paris",
    "postalCode": "75001",
    "country": "FR",
}


class TestSessionStore:
    def test_write_then_read(self):
        store = SessionStore()
        assert store.write(SHIPPING_ADDRESS, ADDRESS, ShippingAddressInput) is True

        address = store.read(SHIPPING_ADDRESS, ShippingAddressInput)
        assert address.postal_code == "75001"

    def test_stored_values_use_wire_names(self):
        storage = {}
        SessionStore(storage).write(SHIPPING_ADDRESS, ADDRESS, ShippingAddressInput)
        assert json.loads(storage[SHIPPING_ADDRESS])["postalCode"] == "75001"

    def test_invalid_value_is_not_written(self):
        storage = {}
        written = SessionStore(storage).write(SHIPPING_ADDRESS, {**ADDRESS, "postalCode": "ABCDE"}, ShippingAddressInput)

        assert written is False
        assert SHIPPING_ADDRESS not in storage

    def test_corrupted_entry_is_discarded(self):
        storage = {SHIPPING_ADDRESS: "{not json"}
        store = SessionStore(storage)

        assert store.read(SHIPPING_ADDRESS, ShippingAddressInput) is None
        assert SHIPPING_ADDRESS not in storage

    def test_invalid_entry_is_discarded(self):
        storage = {SHIPPING_ADDRESS: json.dumps({**ADDRESS, "postalCode": "123"})}
        store = SessionStore(storage)

        assert store.read(SHIPPING_ADDRESS, ShippingAddressInput) is None
        assert SHIPPING_ADDRESS not in storage

    def test_missing_entry(self):
        assert SessionStore().read(SHIPPING_ADDRESS, ShippingAddressInput) is None


class TestContextPersistence:
    def test_round_trip_through_session(self):
        context = submit_shipping_address(sign_in(CheckoutContext(cart_item_count=1)), ADDRESS)
        context = select_carrier(
            context,
            {"carrier": "mondial-relay", "carrierName": "Mondial Relay", "price": 390, "estimatedDays": "3-5 jours"},
        )
        context = choose_relay_point(
            context,
            {"id": "MR-1", "name": "Tabac", "address": "3 place du Marché", "city": "Lyon", "postalCode": "69002"},
        )
        store = SessionStore()

        save_context(store, context)
        restored = load_context(store, cart_item_count=1, authenticated=True)

        assert restored.shipping_address == context.shipping_address
        assert restored.carrier.carrier == "mondial-relay"
        assert restored.relay_point.id == "MR-1"
        assert restored.step == CheckoutStep.PAYMENT

    def test_empty_session_starts_at_auth(self):
        assert load_context(SessionStore(), cart_item_count=1).step == CheckoutStep.AUTH

    def test_address_only_resumes_at_carrier(self):
        store = SessionStore()
        store.write(SHIPPING_ADDRESS, ADDRESS, ShippingAddressInput)

        assert load_context(store, cart_item_count=1).step == CheckoutStep.CARRIER

    def test_corrupted_carrier_falls_back_to_carrier_step(self):
        storage = {SELECTED_CARRIER: "][", SHIPPING_ADDRESS: json.dumps(ADDRESS)}

        context = load_context(SessionStore(storage), cart_item_count=1)

        assert context.carrier is None
        assert context.step == CheckoutStep.CARRIER
        assert SELECTED_CARRIER not in storage

    def test_cleared_values_are_removed(self):
        storage = {SHIPPING_ADDRESS: json.dumps(ADDRESS)}

        save_context(SessionStore(storage), CheckoutContext(cart_item_count=1))

        assert SHIPPING_ADDRESS not in storage

    def test_confirmation_replaces_attempt_state(self):
        storage = {SHIPPING_ADDRESS: json.dumps(ADDRESS)}
        confirmed = CheckoutContext(
            confirmation=OrderConfirmationInput.model_validate(
                {"orderId": "order-1", "total": 9599, "paidAt": "2026-10-17T10:00:00Z"}
            ),
            step=CheckoutStep.CONFIRMATION,
        )

        save_context(SessionStore(storage), confirmed)

        assert SHIPPING_ADDRESS not in storage
        assert json.loads(storage[ORDER_CONFIRMATION])["orderId"] == "order-1"

    def test_carrier_without_address_resumes_at_shipping(self):
        store = SessionStore()
        store.write(
            SELECTED_CARRIER,
            {"carrier": "chronopost", "carrierName": "Chronopost", "price": 599, "estimatedDays": "1-2 jours"},
            CarrierSelectionInput,
        )

        context = load_context(store, cart_item_count=2, authenticated=True)

        assert context.carrier.carrier == "chronopost"
        assert context.step == CheckoutStep.SHIPPING
        assert guard(context.step, context).allowed is True

    def test_emptied_cart_resumes_at_cart(self):
        store = SessionStore()
        store.write(SHIPPING_ADDRESS, ADDRESS, ShippingAddressInput)
        store.write(
            SELECTED_CARRIER,
            {"carrier": "chronopost", "carrierName": "Chronopost", "price": 599, "estimatedDays": "1-2 jours"},
            CarrierSelectionInput,
        )

        context = load_context(store, cart_item_count=0, authenticated=True)

        assert context.step == CheckoutStep.CART

    def test_confirmation_survives_the_emptied_cart(self):
        store = SessionStore()
        store.write(
            ORDER_CONFIRMATION,
            {"orderId": "order-1", "total": 9599, "paidAt": "2026-10-17T10:00:00Z"},
            OrderConfirmationInput,
        )

        assert load_context(store, cart_item_count=0).step == CheckoutStep.CONFIRMATION
