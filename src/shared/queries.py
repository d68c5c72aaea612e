"""Reading Protean DAO queries past the default page size.

``QuerySet.all()`` returns at most one page (100 records unless a limit is
given). ``ResultSet.total`` still counts every match, so callers page with
``offset``/``limit`` and stop once ``total`` is reached.
"""

from protean.exceptions import ValidationError

BATCH_SIZE = 100


def fetch_all(query, batch_size: int = BATCH_SIZE) -> list:
    """Every record matching ``query``, read ``batch_size`` at a time.

    Give ``query`` an ``order_by`` so pages stay stable on SQL providers.
    """
    records = []
    offset = 0
    while True:
        results = query.offset(offset).limit(batch_size).all()
        records.extend(results.items)
        offset += batch_size
        if offset >= results.total:
            return records


def page_of(query, page: int, per_page: int) -> tuple[list, int]:
    """One page of ``query`` and the total number of matches."""
    results = query.offset((page - 1) * per_page).limit(per_page).all()
    return results.items, results.total


def count(query) -> int:
    return query.limit(1).all().total


def unused_number(query, field: str, generate, attempts: int = 5) -> str:
    """A value from ``generate()`` that no stored record holds in ``field``."""
    for _ in range(attempts):
        number = generate()
        if query.filter(**{field: number}).all().first is None:
            return number
    raise ValidationError({field: [f"Could not allocate an unused {field}"]})
