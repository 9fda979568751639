"""Persistence boundary consumed by the credit service"""

import uuid
from typing import List, Optional, Protocol
from vehicle_credit.domain.models import (
    ApplicationFilter,
    ApplicationStats,
    ApplicationStatus,
    CreditApplication,
    DocumentFile,
    Page,
    ReviewInfo,
)


class ApplicationStore(Protocol):
    def create(self, application: CreditApplication) -> CreditApplication: ...

    def find_by_id(self, application_id: uuid.UUID) -> Optional[CreditApplication]: ...

    def find_many(self, filters: ApplicationFilter, page: Page) -> List[CreditApplication]: ...

    def has_open_application(self, applicant_id: str, listing_id: str) -> bool: ...

    def update_status(
        self,
        application_id: uuid.UUID,
        expected_status: ApplicationStatus,
        new_status: ApplicationStatus,
        review_info: Optional[ReviewInfo] = None,
    ) -> Optional[CreditApplication]:
        """Conditional update; returns None when the row is no longer in expected_status"""
        ...

    def append_document(self, application_id: uuid.UUID, document: DocumentFile) -> Optional[CreditApplication]:
        """Attach a document while the application is open; None once it is closed"""
        ...

    def stats(self) -> ApplicationStats: ...
