import pytest
from payments.gateway import reset_gateway
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()

    reset_gateway()
