"""
Read-only access to stored applications.
"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from application_documents.models import Application, Product


class DataContext:
    """Loads applications, with everything a document needs, from a session."""

    def __init__(self, db: Session):
        self.db = db

    def get_application(self, application_id: str) -> Optional[Application]:
        """
        Fetch the single application with the given id.

        Returns None when nothing matches. More than one match raises
        sqlalchemy.orm.exc.MultipleResultsFound, which is left to the caller.
        """
        return (
            self.db.query(Application)
            .options(
                selectinload(Application.person),
                selectinload(Application.legal_entity),
                selectinload(Application.current_review),
                selectinload(Application.products).selectinload(Product.funds),
            )
            .filter(Application.id == str(application_id))
            .one_or_none()
        )
