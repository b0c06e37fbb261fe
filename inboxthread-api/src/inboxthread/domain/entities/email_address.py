from __future__ import annotations
from dataclasses import dataclass


def extract_domain(address: str) -> str:
    """Lower-cased text after the last ``@``, or ``""`` when there is none."""
    if not isinstance(address, str):
        return ""
    at = address.rfind("@")
    if at == -1:
        return ""
    return address[at + 1:].lower()


@dataclass(frozen=True)
class EmailAddress:
    """A single mailbox pulled out of an address header.

    ``address`` is lower-cased when it looks like an address (contains ``@``)
    and is what comparisons and thread keys use. ``raw_address`` keeps the
    casing the sender used, for display.
    """

    address: str
    name: str = ""
    raw_address: str = ""

    @property
    def domain(self) -> str:
        return extract_domain(self.address)

    def display(self) -> str:
        shown = self.raw_address or self.address
        return f"{self.name} <{shown}>" if self.name else shown
