"""Authorization gate: who may view, review or cancel an application"""

from typing import Iterable, Protocol
from vehicle_credit.domain.models import ApplicationStatus, CreditApplication, Identity


class AuthorizationGate(Protocol):
    """Capability consumed by the credit service; the role source is pluggable"""

    def can_view(self, identity: Identity, application: CreditApplication) -> bool: ...

    def can_review(self, identity: Identity) -> bool: ...

    def can_cancel(self, identity: Identity, application: CreditApplication) -> bool: ...


class RoleAuthorizationGate:
    """Gate backed by a fixed set of reviewer roles from configuration"""

    def __init__(self, reviewer_roles: Iterable[str]):
        self.reviewer_roles = frozenset(reviewer_roles)

    def can_view(self, identity: Identity, application: CreditApplication) -> bool:
        return identity.id == application.applicant_id or self.can_review(identity)

    def can_review(self, identity: Identity) -> bool:
        return identity.role in self.reviewer_roles

    def can_cancel(self, identity: Identity, application: CreditApplication) -> bool:
        return identity.id == application.applicant_id and application.status == ApplicationStatus.PENDING
