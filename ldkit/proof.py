"""Linked-data proofs: the proof object, its encodings and its place in a document."""

from __future__ import annotations

import base64
import binascii
import enum
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

_TYPE = "type"
_CREATOR = "creator"
_CREATED = "created"
_DOMAIN = "domain"
_NONCE = "nonce"
_PROOF_VALUE = "proofValue"
_PROOF_PURPOSE = "proofPurpose"
_JWS = "jws"
_VERIFICATION_METHOD = "verificationMethod"
_CHALLENGE = "challenge"
_CAPABILITY_CHAIN = "capabilityChain"
_PROOF = "proof"

ED25519_SIGNATURE_2020 = "Ed25519Signature2020"
DATA_INTEGRITY_PROOF = "DataIntegrityProof"

_URL_CHARS = re.compile(r"[A-Za-z0-9_-]*")
_STD_CHARS = re.compile(r"[A-Za-z0-9+/]*")
_STD_PADDED = re.compile(r"[A-Za-z0-9+/]*={0,2}")
_URL_PADDED = re.compile(r"[A-Za-z0-9_-]*={0,2}")

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


class SignatureRepresentation(enum.IntEnum):
    """Where a proof carries its signature."""

    PROOF_VALUE = 0
    JWS = 1


class ProofNotFoundError(LookupError):
    """Raised when a document carries no proof."""

    def __init__(self, message: str = "proof not found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class ProofTime:
    """A timestamp that keeps the exact text it was parsed from."""

    time: datetime
    text: str | None = None

    def format(self) -> str:
        """Return the original text, or an RFC 3339 form with trimmed fraction."""
        if self.text is not None:
            return self.text
        moment = self.time
        stamp = moment.strftime("%Y-%m-%dT%H:%M:%S")
        fraction = f"{moment.microsecond:06d}".rstrip("0")
        if fraction:
            stamp += "." + fraction
        offset = moment.utcoffset()
        if offset is None or offset == timedelta(0):
            return stamp + "Z"
        sign = "+" if offset > timedelta(0) else "-"
        minutes = abs(int(offset.total_seconds())) // 60
        return f"{stamp}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def parse_time(value: str) -> ProofTime:
    """Parse an RFC 3339 timestamp, remembering its text."""
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f'parsing time "{value}" as RFC 3339: invalid format')
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    try:
        moment = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
        )
    except ValueError as err:
        raise ValueError(f'parsing time "{value}": {err}') from None
    return ProofTime(moment, value)


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64_decode(text: str, *, url: bool, padded: bool) -> bytes:
    if padded:
        pattern = _URL_PADDED if url else _STD_PADDED
        valid = pattern.fullmatch(text) is not None and len(text) % 4 == 0
    else:
        pattern = _URL_CHARS if url else _STD_CHARS
        valid = pattern.fullmatch(text) is not None and len(text) % 4 != 1
        text += "=" * (-len(text) % 4)
    if not valid:
        raise ValueError("illegal base64 data")
    try:
        return base64.b64decode(text, altchars=b"-_" if url else None)
    except binascii.Error as err:
        raise ValueError(f"illegal base64 data: {err}") from None


def _b64url_decode(text: str) -> bytes:
    return _b64_decode(text, url=True, padded=False)


def _decode_base64(text: str) -> bytes:
    for url, padded in ((True, False), (False, True), (False, False)):
        try:
            return _b64_decode(text, url=url, padded=padded)
        except ValueError:
            continue
    raise ValueError("unsupported encoding")


def _b58_encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, rest = divmod(number, 58)
        digits.append(_B58_ALPHABET[rest])
    zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * zeros + "".join(reversed(digits))


def _b58_decode(text: str) -> bytes:
    number = 0
    for char in text:
        index = _B58_ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"invalid base58 character {char!r}")
        number = number * 58 + index
    zeros = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\0" * zeros + body


def _multibase_decode(text: str) -> bytes:
    if not text:
        raise ValueError("cannot decode multibase for zero length string")
    prefix, body = text[0], text[1:]
    if prefix == "z":
        return _b58_decode(body)
    if prefix == "u":
        return _b64_decode(body, url=True, padded=False)
    if prefix == "U":
        return _b64_decode(body, url=True, padded=True)
    if prefix == "m":
        return _b64_decode(body, url=False, padded=False)
    if prefix == "M":
        return _b64_decode(body, url=False, padded=True)
    if prefix in ("f", "F"):
        return bytes.fromhex(body)
    raise ValueError(f"unsupported multibase prefix {prefix!r}")


def decode_proof_value(value: str, proof_type: str) -> bytes:
    """Decode a proofValue according to the proof type."""
    if proof_type == ED25519_SIGNATURE_2020:
        try:
            return _multibase_decode(value)
        except ValueError:
            raise ValueError("unsupported encoding") from None
    if proof_type == DATA_INTEGRITY_PROOF:
        return value.encode("utf-8")
    return _decode_base64(value)


def encode_proof_value(proof_value: bytes, proof_type: str) -> str:
    """Encode a proofValue according to the proof type."""
    if proof_type == ED25519_SIGNATURE_2020:
        return "z" + _b58_encode(proof_value)
    if proof_type == DATA_INTEGRITY_PROOF:
        return proof_value.decode("utf-8", errors="replace")
    return _b64url_encode(proof_value)


def _string_entry(entry: Any) -> str:
    return entry if isinstance(entry, str) else ""


@dataclass
class Proof:
    """A cryptographic proof of a JSON-LD document's integrity."""

    type: str = ""
    created: ProofTime | None = None
    creator: str = ""
    verification_method: str = ""
    proof_value: bytes = b""
    jws: str = ""
    proof_purpose: str = ""
    domain: str = ""
    nonce: bytes = b""
    challenge: str = ""
    signature_representation: SignatureRepresentation = SignatureRepresentation.PROOF_VALUE
    capability_chain: list[Any] | None = None

    def to_jsonld(self) -> dict[str, Any]:
        """Return the proof as a JSON-LD object."""
        emap: dict[str, Any] = {_TYPE: self.type}
        if self.creator:
            emap[_CREATOR] = self.creator
        if self.verification_method:
            emap[_VERIFICATION_METHOD] = self.verification_method
        if self.created is not None:
            emap[_CREATED] = self.created.format()
        if self.proof_value:
            emap[_PROOF_VALUE] = encode_proof_value(self.proof_value, self.type)
        if self.jws:
            emap[_JWS] = self.jws
        if self.domain:
            emap[_DOMAIN] = self.domain
        if self.nonce:
            emap[_NONCE] = _b64url_encode(self.nonce)
        if self.proof_purpose:
            emap[_PROOF_PURPOSE] = self.proof_purpose
        if self.challenge:
            emap[_CHALLENGE] = self.challenge
        if self.capability_chain is not None:
            emap[_CAPABILITY_CHAIN] = self.capability_chain
        return emap

    def public_key_id(self) -> str:
        """Return the verification method, or else the creator."""
        if self.verification_method:
            return self.verification_method
        if self.creator:
            return self.creator
        raise ValueError("no public key ID")


def parse_proof(emap: dict[str, Any]) -> Proof:
    """Build a Proof from its JSON-LD object."""
    created = parse_time(_string_entry(emap.get(_CREATED)))
    proof_type = _string_entry(emap.get(_TYPE))

    proof_value = b""
    jws = ""
    holder = SignatureRepresentation.PROOF_VALUE
    if _PROOF_VALUE in emap:
        proof_value = decode_proof_value(_string_entry(emap[_PROOF_VALUE]), proof_type)
    elif _JWS in emap:
        jws = _string_entry(emap[_JWS])
        holder = SignatureRepresentation.JWS

    if not proof_value and not jws:
        raise ValueError("signature is not defined")

    nonce = _decode_base64(_string_entry(emap.get(_NONCE)))

    chain = emap.get(_CAPABILITY_CHAIN) if _CAPABILITY_CHAIN in emap else None
    if _CAPABILITY_CHAIN in emap and not isinstance(chain, list):
        raise ValueError(
            "failed to decode capabilityChain: "
            f"invalid format for capabilityChain - must be an array: {chain!r}"
        )

    return Proof(
        type=proof_type,
        created=created,
        creator=_string_entry(emap.get(_CREATOR)),
        verification_method=_string_entry(emap.get(_VERIFICATION_METHOD)),
        proof_value=proof_value,
        jws=jws,
        proof_purpose=_string_entry(emap.get(_PROOF_PURPOSE)),
        domain=_string_entry(emap.get(_DOMAIN)),
        nonce=nonce,
        challenge=_string_entry(emap.get(_CHALLENGE)),
        signature_representation=holder,
        capability_chain=chain,
    )


def get_proofs(doc: dict[str, Any]) -> list[Proof]:
    """Return the proofs of a JSON-LD object."""
    if _PROOF not in doc:
        raise ProofNotFoundError()
    entry = doc[_PROOF]
    if isinstance(entry, dict):
        entries: list[Any] = [entry]
    elif isinstance(entry, list):
        entries = entry
    else:
        raise ValueError("expecting a list or an object of proofs")
    proofs = []
    for item in entries:
        if not isinstance(item, dict):
            raise ValueError("each proof must be an object")
        proofs.append(parse_proof(item))
    return proofs


def add_proof(doc: dict[str, Any], proof: Proof) -> None:
    """Append a proof to a JSON-LD object, turning a single proof into a list."""
    if _PROOF in doc:
        entry = doc[_PROOF]
        proofs = list(entry) if isinstance(entry, list) else [entry]
    else:
        proofs = []
    proofs.append(proof.to_jsonld())
    doc[_PROOF] = proofs


def copy_without_proof(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return a shallow copy of a JSON-LD object without its proofs."""
    if doc is None:
        return None
    return {key: value for key, value in doc.items() if key != _PROOF}