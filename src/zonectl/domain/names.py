"""Domain name normalization to ASCII canonical form.

ASCII labels are lowercased and checked against LDH syntax, extended with
underscore service labels (``_dmarc``, ``_acme-challenge``). A lone ``*``
wildcard is accepted only as the leftmost label of a full name.
Internationalized labels go through UTS-46 mapping and IDNA 2008 to their
``xn--`` A-label form.

INVARIANT: normalize_name() is idempotent on its own output.
"""

from __future__ import annotations

import re

import idna

from zonectl.domain.errors import InvalidNameError

MAX_LABEL_LENGTH = 63
MAX_NAME_LENGTH = 253

# Full stop plus the ideographic/fullwidth/halfwidth dots UTS-46 maps to it.
_LABEL_SEPARATORS = re.compile("[.。．｡]")

_ASCII_LABEL = re.compile(r"^[a-z0-9_](?:[a-z0-9_-]*[a-z0-9_])?$")

WILDCARD = "*"

_ACE_PREFIX = "xn--"


def normalize_label(label: str) -> str:
    """Convert a single label to its lowercase ASCII form.

    Raises:
        InvalidNameError: If the label is empty, too long, or not
            representable as an IDNA label.
    """
    if not label:
        raise InvalidNameError("empty label", label=label)

    if label.isascii():
        ascii_label = label.lower()
        if ascii_label.startswith(_ACE_PREFIX):
            try:
                idna.decode(ascii_label)
            except UnicodeError as exc:
                msg = f"invalid A-label {label!r}: {exc}"
                raise InvalidNameError(msg, label=label) from exc
    else:
        try:
            ascii_label = idna.encode(label, uts46=True).decode("ascii")
        except UnicodeError as exc:
            msg = f"invalid internationalized label {label!r}: {exc}"
            raise InvalidNameError(msg, label=label) from exc

    if len(ascii_label) > MAX_LABEL_LENGTH:
        msg = f"label {label!r} exceeds {MAX_LABEL_LENGTH} octets"
        raise InvalidNameError(msg, label=label)
    if not _ASCII_LABEL.match(ascii_label):
        msg = f"label {label!r} contains characters not allowed in a host name"
        raise InvalidNameError(msg, label=label)
    return ascii_label


def normalize_name(name: str, *, wildcard: bool = True) -> str:
    """Normalize a dotted name label by label.

    A single trailing dot (fully-qualified form) is dropped. The first label
    may be the ``*`` wildcard when *wildcard* is true; no other label may.

    Examples:
        >>> normalize_name("Example.COM.")
        'example.com'
        >>> normalize_name("bücher.example")
        'xn--bcher-kva.example'
    """
    labels = _LABEL_SEPARATORS.split(name)
    if len(labels) > 1 and labels[-1] == "":
        labels.pop()
    if labels == [""]:
        raise InvalidNameError("empty domain name", name=name)

    try:
        ascii_labels = [
            WILDCARD if index == 0 and wildcard and label == WILDCARD else normalize_label(label)
            for index, label in enumerate(labels)
        ]
    except InvalidNameError as exc:
        msg = f"invalid domain name {name!r}: {exc}"
        raise InvalidNameError(msg, name=name) from exc
    ascii_name = ".".join(ascii_labels)

    if len(ascii_name) > MAX_NAME_LENGTH:
        msg = f"domain name {name!r} exceeds {MAX_NAME_LENGTH} octets"
        raise InvalidNameError(msg, name=name)
    return ascii_name


def canonicalize(domain: str, subdomain: str = "") -> tuple[str, str, str]:
    """Normalize a domain/subdomain pair and derive the canonical name.

    Returns ``(domain, subdomain, canonical_name)``. An empty subdomain is
    never passed through the converter and yields the apex name. The
    wildcard label is only accepted at the left edge of the canonical name.

    Examples:
        >>> canonicalize("Example.com")
        ('example.com', '', 'example.com')
        >>> canonicalize("Example.com", "WWW")
        ('example.com', 'www', 'www.example.com')
    """
    ascii_domain = normalize_name(domain, wildcard=not subdomain)
    if not subdomain:
        return ascii_domain, "", ascii_domain

    ascii_subdomain = normalize_name(subdomain)
    canonical = f"{ascii_subdomain}.{ascii_domain}"
    if len(canonical) > MAX_NAME_LENGTH:
        msg = f"canonical name {canonical!r} exceeds {MAX_NAME_LENGTH} octets"
        raise InvalidNameError(msg, name=canonical)
    return ascii_domain, ascii_subdomain, canonical
