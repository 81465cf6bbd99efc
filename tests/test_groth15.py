from __future__ import annotations

import pytest

from spsbench import BilinearGroup, OperationFailure, registry
from spsbench_sps import Groth15G1, Groth15G2

from conftest import TEST_ORDER

N = 4


@pytest.fixture(params=[Groth15G1, Groth15G2], ids=["g1", "g2"])
def scheme(request):
    group = BilinearGroup(TEST_ORDER)
    op = request.param()
    instance = op.construct(group, N)
    msg_group = group.group(op.message_group)
    message = tuple(msg_group.random_element() for _ in range(N))
    return instance, msg_group, message


def test_registered() -> None:
    items = registry.list()
    assert items["groth15-g1"] is Groth15G1
    assert items["groth15-g2"] is Groth15G2


def test_sign_then_verify(scheme) -> None:
    instance, _, message = scheme
    kp = instance.generate_key_pair(N)
    sig = instance.sign(kp.signing_key, message)
    assert instance.verify(message, sig, kp.verification_key) is True


def test_tampered_message_fails_verification(scheme) -> None:
    instance, msg_group, message = scheme
    kp = instance.generate_key_pair(N)
    sig = instance.sign(kp.signing_key, message)
    tampered = (message[0] * msg_group.generator(),) + message[1:]
    assert instance.verify(tampered, sig, kp.verification_key) is False


def test_foreign_key_fails_verification(scheme) -> None:
    instance, _, message = scheme
    kp = instance.generate_key_pair(N)
    other = instance.generate_key_pair(N)
    sig = instance.sign(kp.signing_key, message)
    assert instance.verify(message, sig, other.verification_key) is False


def test_round_trips_preserve_verification(scheme) -> None:
    instance, _, message = scheme
    kp = instance.generate_key_pair(N)
    sig = instance.sign(kp.signing_key, message)

    kp2 = instance.restore_key_pair(instance.serialize_key_pair(kp))
    sig2 = instance.restore_signature(instance.serialize_signature(sig))

    assert kp2 == kp
    assert sig2 == sig
    assert instance.verify(message, sig2, kp2.verification_key) is True
    sig3 = instance.sign(kp2.signing_key, message)
    assert instance.verify(message, sig3, kp.verification_key) is True


def test_wrong_message_length_is_an_operation_failure(scheme) -> None:
    instance, _, message = scheme
    kp = instance.generate_key_pair(N)
    with pytest.raises(OperationFailure):
        instance.sign(kp.signing_key, message[:-1])
    sig = instance.sign(kp.signing_key, message)
    with pytest.raises(OperationFailure):
        instance.verify(message + message[:1], sig, kp.verification_key)
    with pytest.raises(OperationFailure):
        instance.generate_key_pair(N + 1)


def test_malformed_encodings(scheme) -> None:
    instance, _, message = scheme
    kp = instance.generate_key_pair(N)
    sig = instance.sign(kp.signing_key, message)
    with pytest.raises(OperationFailure):
        instance.restore_signature(instance.serialize_signature(sig)[:-1])
    with pytest.raises(OperationFailure):
        instance.restore_signature(b"\x00")
    with pytest.raises(OperationFailure):
        instance.restore_key_pair(instance.serialize_key_pair(kp) + b"\x00")


def test_key_encoding_is_bound_to_message_length() -> None:
    group = BilinearGroup(TEST_ORDER)
    small = Groth15G1().construct(group, 2)
    large = Groth15G1().construct(group, 3)
    data = small.serialize_key_pair(small.generate_key_pair(2))
    with pytest.raises(OperationFailure):
        large.restore_key_pair(data)


def test_messages_from_the_wrong_group_are_rejected() -> None:
    group = BilinearGroup(TEST_ORDER)
    instance = Groth15G1().construct(group, 2)
    kp = instance.generate_key_pair(2)
    with pytest.raises(OperationFailure):
        instance.sign(kp.signing_key, (group.g2.generator(), group.g2.generator()))


def test_construct_rejects_bad_parameters() -> None:
    group = BilinearGroup(TEST_ORDER)
    with pytest.raises(OperationFailure):
        Groth15G1().construct(group, 0)
