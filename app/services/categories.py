"""Category management. Names are unique case-insensitively."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Category, Image
from app.schemas.category import CategoryCreate, CategoryUpdate
from app.services.errors import bad_request, conflict, not_found


def _find_by_name(db: Session, name: str, exclude_id: str | None = None) -> Category | None:
    query = db.query(Category).filter(func.lower(Category.name) == name.strip().lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first()


def resolve_category(db: Session, ref: str, active_only: bool = True) -> Category | None:
    """Look up a category by id, falling back to case-insensitive name."""
    ref = (ref or "").strip()
    if not ref:
        return None
    category = db.get(Category, ref)
    if category is None:
        category = _find_by_name(db, ref)
    if category is None or (active_only and not category.is_active):
        return None
    return category


def list_active(db: Session) -> list[Category]:
    return db.query(Category).filter(Category.is_active.is_(True)).order_by(Category.name).all()


def list_with_counts(db: Session) -> list[tuple[Category, int]]:
    counts = dict(
        db.query(Image.category_id, func.count(Image.id)).group_by(Image.category_id).all()
    )
    categories = db.query(Category).order_by(Category.name).all()
    return [(c, counts.get(c.id, 0)) for c in categories]


def image_count(db: Session, category_id: str) -> int:
    return db.query(Image).filter(Image.category_id == category_id).count()


def create_category(db: Session, body: CategoryCreate) -> Category:
    name = (body.name or "").strip()
    if not name:
        raise bad_request("Category name is required", field="name")
    if _find_by_name(db, name) is not None:
        raise conflict("Category already exists", field="name")
    category = Category(
        name=name,
        description=(body.description or "").strip(),
        is_active=True,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: str, body: CategoryUpdate) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise not_found("Category not found")

    if body.name is not None and body.name.strip() != category.name:
        new_name = body.name.strip()
        if not new_name:
            raise bad_request("Category name is required", field="name")
        if _find_by_name(db, new_name, exclude_id=category_id) is not None:
            raise conflict("Category name already exists", field="name")
        # Images reference the category by id, so a rename needs no image updates.
        category.name = new_name
    if body.description is not None:
        category.description = body.description.strip()
    if body.is_active is not None:
        category.is_active = body.is_active

    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: str) -> None:
    """Refused while any image references the category."""
    category = db.get(Category, category_id)
    if category is None:
        raise not_found("Category not found")
    count = image_count(db, category_id)
    if count > 0:
        raise bad_request(
            f"Cannot delete category. {count} image(s) are using this category. "
            "Please update or delete those images first."
        )
    db.delete(category)
    db.commit()
