"""
Invoicer Backend — Include Resolution
=======================================

What:  Turns the caller's `include` parameter into the set of relation paths
       to eager-load and embed, and scopes that set while the serializer
       walks nested relations.
Why:   Some relations are only useful together with their own children
       (a client without contacts, an invoice without items), so short
       names expand to deeper dotted paths through a fixed alias table.

Examples:
    resolve_includes("invoices", {"contacts"})
        → {"contacts", "invoices", "invoices.invoice_items"}
    resolve_includes("", {"contacts"})
        → {"contacts"}
    resolve_includes("payments,,client", set())
        → {"payments", "client", "client.contacts"}

Unknown names are not rejected here. They are forwarded to the query layer,
which raises when the model has no such relation.
"""

from typing import Dict, Iterable, Optional, Set, Tuple

# Short relation name → deeper paths loaded alongside it
INCLUDE_ALIASES: Dict[str, Tuple[str, ...]] = {
    "invoices": ("invoices.invoice_items",),
    "client": ("client.contacts",),
    "clients": ("clients.contacts",),
    "vendors": ("vendors.vendor_contacts",),
}


def resolve_includes(requested_csv: Optional[str], defaults: Iterable[str]) -> Set[str]:
    """
    Union of the transformer's default includes and the requested tokens,
    with aliases expanded. Empty tokens are dropped.
    """
    includes = set(defaults)
    for token in (requested_csv or "").split(","):
        token = token.strip()
        if not token:
            continue
        includes.add(token)
        includes.update(INCLUDE_ALIASES.get(token, ()))
    return includes


def top_level(includes: Iterable[str]) -> Set[str]:
    """First segment of every path: {"client.contacts", "vendor"} → {"client", "vendor"}."""
    return {path.split(".", 1)[0] for path in includes}


def scope(includes: Iterable[str], relation: str) -> Set[str]:
    """Paths below `relation`: scope({"client.contacts", "vendor"}, "client") → {"contacts"}."""
    prefix = relation + "."
    return {path[len(prefix):] for path in includes if path.startswith(prefix)}
