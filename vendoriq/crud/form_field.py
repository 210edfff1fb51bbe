# vendoriq/crud/form_field.py
from typing import List
from sqlalchemy.orm import Session

from vendoriq.models.form_field import FormField
from vendoriq.services.form_validation_service import FieldDefinition


# Active fields of a category, in display order
def get_form_fields(db: Session, category_id: int) -> List[FormField]:
    return (
        db.query(FormField)
        .filter(FormField.category_id == category_id, FormField.is_active == True)  # noqa: E712
        .order_by(FormField.sort_order, FormField.id)
        .all()
    )


class FormFieldRepository:
    """Schema source for FormValidationService, loaded in a single query."""

    def __init__(self, db: Session):
        self.db = db

    def list_active_fields(self, category_id: int) -> List[FieldDefinition]:
        return [FieldDefinition.from_model(row) for row in get_form_fields(self.db, category_id)]
