"""Diff engine for table reconciliation.

Compares the expected tables against the names already present in the store
and splits the expected tables into those to create and those whose
throughput needs checking. Tables present in the store but not expected are
left alone: nothing is ever deleted.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import TableDescriptor


def partition_tables(
    expected: Iterable[TableDescriptor],
    existing_names: Iterable[str],
) -> tuple[list[TableDescriptor], list[TableDescriptor]]:
    """
    Work out which expected tables need creating and which need checking.

    Both inputs are sorted here, then walked together in a single merge pass.

    Args:
        expected: Desired table descriptors
        existing_names: Names of the tables the store already has

    Returns:
        ``(to_create, to_check)``, which together partition ``expected``
    """
    descriptions = sorted(expected, key=lambda t: t.name)
    existing = sorted(existing_names)

    to_create: list[TableDescriptor] = []
    to_check: list[TableDescriptor] = []
    i, j = 0, 0
    while i < len(descriptions) and j < len(existing):
        name = descriptions[i].name
        if name < existing[j]:
            # Table doesn't exist
            to_create.append(descriptions[i])
            i += 1
        elif name > existing[j]:
            # Existing table isn't expected, ignore it
            j += 1
        else:
            # Table exists, its throughput needs checking
            to_check.append(descriptions[i])
            i += 1
            j += 1
    to_create.extend(descriptions[i:])

    return to_create, to_check
