"""Store contract checks, run against both the in-memory and SQL implementations."""

import pytest

from cardpay.common.errors import InvalidPaymentStatus
from cardpay.services.payments.entities import Payment, PaymentStatus
from cardpay.services.transactions.entities import Transaction, TransactionStatus


def make_payment(customer_data, payment_method, reference="REF-1") -> Payment:
    return Payment.create(
        amount=5000,
        currency="COP",
        reference=reference,
        customer_email="a@example.com",
        customer_data=customer_data,
        payment_method=payment_method,
        acceptance_token="tok_a",
        signature="sig",
    )


async def test_transaction_save_and_find(transaction_store):
    saved = await transaction_store.save(Transaction.create())

    found = await transaction_store.find_by_id(saved.id)
    assert found == saved
    assert found.status == TransactionStatus.PENDING
    assert await transaction_store.find_by_id("missing") is None


async def test_transaction_status_is_free_vocabulary(transaction_store):
    saved = await transaction_store.save(Transaction.create())

    updated = await transaction_store.update_status(saved.id, "VOIDED")
    assert updated.status == "VOIDED"
    assert updated.created_at == saved.created_at
    assert updated.updated_at >= saved.updated_at
    assert (await transaction_store.find_by_id(saved.id)).status == "VOIDED"


async def test_transaction_update_unknown_id_returns_none(transaction_store):
    assert await transaction_store.update_status("does-not-exist", TransactionStatus.FAILED) is None


async def test_payment_save_find_by_id_and_reference(payment_store, customer_data, payment_method):
    saved = await payment_store.save(make_payment(customer_data, payment_method, reference="REF-XYZ"))

    assert await payment_store.find_by_id(saved.id) == saved
    assert (await payment_store.find_by_reference("REF-XYZ")).id == saved.id
    assert await payment_store.find_by_reference("REF-NOPE") is None
    assert await payment_store.find_by_id("missing") is None


@pytest.mark.parametrize("status", ["APPROVED", "not-a-status", ""])
async def test_payment_update_unknown_id_returns_none(payment_store, status):
    assert await payment_store.update_status("does-not-exist", status) is None


async def test_payment_update_returns_new_record(payment_store, customer_data, payment_method):
    saved = await payment_store.save(make_payment(customer_data, payment_method))

    updated = await payment_store.update_status(saved.id, "DECLINED")

    assert updated.status == PaymentStatus.DECLINED
    assert updated.id == saved.id
    assert updated.updated_at >= saved.updated_at
    assert saved.status == PaymentStatus.PENDING


async def test_payment_update_rejects_unknown_status(payment_store, customer_data, payment_method):
    saved = await payment_store.save(make_payment(customer_data, payment_method))

    with pytest.raises(InvalidPaymentStatus):
        await payment_store.update_status(saved.id, "VOIDED")
    assert (await payment_store.find_by_id(saved.id)).status == PaymentStatus.PENDING


def test_payment_with_status_does_not_mutate_original(customer_data, payment_method):
    original = make_payment(customer_data, payment_method)

    approved = original.with_status(PaymentStatus.APPROVED)

    assert original.status == PaymentStatus.PENDING
    assert approved.status == PaymentStatus.APPROVED
    assert approved.created_at == original.created_at
    assert approved.reference == original.reference
    with pytest.raises(Exception):
        original.status = PaymentStatus.ERROR


def test_new_records_have_distinct_ids():
    assert len({Transaction.create().id for _ in range(50)}) == 50
