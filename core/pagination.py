from sqlalchemy.orm import Query


def paginate(query: Query, page: int, per_page: int) -> tuple[list, int]:
    """
    Return the items of the given 1-based page and the total item count.
    Pages past the end are empty.
    """
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total
