import hashlib
import uuid

from talentgate.services.candidate_identity import candidate_uuid


def test_candidate_uuid_is_rfc4122_v5():
    u = uuid.UUID(candidate_uuid("x@uni.edu"))
    assert u.version == 5
    assert u.variant == uuid.RFC_4122


def test_candidate_uuid_matches_sha1_over_namespace_and_email():
    ns = uuid.UUID("6ba7b811-9dad-11d1-80b4-00c04fd430c8")
    digest = bytearray(hashlib.sha1(ns.bytes + "x@uni.edu".encode("utf-8")).digest()[:16])
    digest[6] = (digest[6] & 0x0F) | 0x50
    digest[8] = (digest[8] & 0x3F) | 0x80
    assert candidate_uuid("x@uni.edu") == str(uuid.UUID(bytes=bytes(digest)))
    # the default namespace is the RFC 4122 URL namespace
    assert candidate_uuid("x@uni.edu") == str(uuid.uuid5(uuid.NAMESPACE_URL, "x@uni.edu"))


def test_candidate_uuid_is_stable_and_distinct_per_email():
    assert candidate_uuid("x@uni.edu") == candidate_uuid("x@uni.edu")
    assert candidate_uuid("x@uni.edu") != candidate_uuid("y@uni.edu")


def test_candidate_uuid_custom_namespace():
    assert candidate_uuid("x@uni.edu", str(uuid.NAMESPACE_DNS)) == str(uuid.uuid5(uuid.NAMESPACE_DNS, "x@uni.edu"))
